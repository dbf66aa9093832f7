"""Pydantic models for the create-user form."""

import math
from typing import Any, Dict, List, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic_core import PydanticCustomError


REQUIRED_EMAIL_SUFFIX = "@gmail.com"
MIN_PASSWORD_LENGTH = 6
MIN_TECHS = 2
KNOWLEDGE_MIN = 1
KNOWLEDGE_MAX = 100


class AvatarFile(BaseModel):
    """A file picked by the user for the avatar field."""
    
    name: str = Field(..., description="File name as selected by the user")
    content: bytes = Field(..., repr=False, description="Raw file content")
    content_type: str = Field(
        default="application/octet-stream",
        description="MIME type reported by the browser"
    )
    
    @property
    def size(self) -> int:
        """Size of the file in bytes."""
        return len(self.content)
    
    def describe(self) -> Dict[str, Any]:
        """Summary of the file without its content."""
        return {
            "name": self.name,
            "content_type": self.content_type,
            "size": self.size,
        }


def _coerce_number(value: Any) -> Union[int, float]:
    """
    Coerce a text or numeric input into a number.
    
    Empty input counts as zero, the same as a blank number box.
    
    Raises:
        PydanticCustomError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise PydanticCustomError("invalid_format", "Value must be a number")
    
    if value is None:
        return 0
    
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            raise PydanticCustomError("invalid_format", "Value must be a number")
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise PydanticCustomError("invalid_format", "Value must be a number")
    
    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            raise PydanticCustomError("invalid_format", "Value must be a finite number")
        if number.is_integer():
            return int(number)
    return number


class TechEntry(BaseModel):
    """A validated technology row."""
    
    title: str = Field(..., description="Technology name")
    knowledge: Union[int, float] = Field(
        ...,
        description=f"Skill level between {KNOWLEDGE_MIN} and {KNOWLEDGE_MAX}"
    )
    
    @field_validator("title", mode="before")
    @classmethod
    def title_required(cls, value: Any) -> Any:
        if value is None or value == "":
            raise PydanticCustomError("required", "Title is required")
        return value
    
    @field_validator("knowledge", mode="before")
    @classmethod
    def knowledge_in_range(cls, value: Any) -> Union[int, float]:
        number = _coerce_number(value)
        if not KNOWLEDGE_MIN <= number <= KNOWLEDGE_MAX:
            raise PydanticCustomError(
                "out_of_range",
                "Knowledge must be between {min} and {max}",
                {"min": KNOWLEDGE_MIN, "max": KNOWLEDGE_MAX}
            )
        return number


class CreateUserForm(BaseModel):
    """Validated and normalised create-user submission."""
    
    avatar: AvatarFile
    name: str
    email: str
    password: str
    techs: List[TechEntry] = Field(
        default_factory=list,
        min_length=MIN_TECHS,
        validate_default=True
    )
    
    @field_validator("avatar", mode="before")
    @classmethod
    def first_selected_file(cls, value: Any) -> Any:
        # The input hands over the whole selection; only the first file is kept
        if value is None:
            raise PydanticCustomError("missing_file", "An avatar file is required")
        if isinstance(value, (list, tuple)):
            if not value:
                raise PydanticCustomError("missing_file", "An avatar file is required")
            return value[0]
        return value
    
    @field_validator("name", mode="before")
    @classmethod
    def name_required(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError("required", "Name is required")
        return value
    
    @field_validator("name")
    @classmethod
    def title_case_name(cls, value: str) -> str:
        """Upper-case the first character of every word, keep the rest."""
        words = value.strip().split(" ")
        return " ".join(word[:1].upper() + word[1:] for word in words)
    
    @field_validator("email", mode="before")
    @classmethod
    def email_required(cls, value: Any) -> Any:
        if value is None or value == "":
            raise PydanticCustomError("required", "Email is required")
        return value
    
    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise PydanticCustomError(
                "invalid_format",
                "Invalid email format: {reason}",
                {"reason": str(e)}
            )
        
        email = value.lower()
        if not email.endswith(REQUIRED_EMAIL_SUFFIX):
            raise PydanticCustomError(
                "domain_rejected",
                "Email must end with {suffix}",
                {"suffix": REQUIRED_EMAIL_SUFFIX}
            )
        return email
    
    @field_validator("password", mode="before")
    @classmethod
    def password_present(cls, value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("required", "Password is required")
        return value
    
    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "too_short",
                "Password must have at least {min} characters",
                {"min": MIN_PASSWORD_LENGTH}
            )
        return value
    
    @field_validator("techs", mode="before")
    @classmethod
    def techs_default(cls, value: Any) -> Any:
        return [] if value is None else value
    
    @field_serializer("avatar")
    def serialize_avatar(self, avatar: AvatarFile) -> Dict[str, Any]:
        return avatar.describe()
