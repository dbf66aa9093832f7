"""Result models for validation and submission."""

from enum import Enum
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from profile_form.models.form_models import CreateUserForm


class FieldErrorKind(str, Enum):
    """Kinds of field-level failures shown next to a field."""
    
    REQUIRED = "required"
    INVALID_FORMAT = "invalid_format"
    DOMAIN_REJECTED = "domain_rejected"
    TOO_SHORT = "too_short"
    OUT_OF_RANGE = "out_of_range"
    TOO_FEW = "too_few"
    MISSING_FILE = "missing_file"
    UPLOAD_FAILURE = "upload_failure"


class FieldError(BaseModel):
    """A single field error."""
    
    kind: FieldErrorKind
    message: str


# Field path (e.g. "techs[1].title") -> error
FieldErrorMap = Dict[str, FieldError]


class ValidationSuccess(BaseModel):
    """Validation passed; holds the transformed form data."""
    
    ok: Literal[True] = True
    value: CreateUserForm


class ValidationFailure(BaseModel):
    """Validation failed; holds every failing field."""
    
    ok: Literal[False] = False
    errors: Dict[str, FieldError] = Field(default_factory=dict)
    
    def messages(self) -> Dict[str, str]:
        """Plain path -> message mapping for display."""
        return {path: error.message for path, error in self.errors.items()}


ValidationResult = Union[ValidationSuccess, ValidationFailure]


class SubmissionStatus(str, Enum):
    """Where the latest submission attempt is, or how it ended."""
    
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload_failed"


class SubmissionOutcome(BaseModel):
    """What a call to submit did."""
    
    accepted: bool = Field(
        ...,
        description="False when the call was ignored because another submission was in flight"
    )
    status: SubmissionStatus
    errors: Dict[str, FieldError] = Field(default_factory=dict)
    output: Optional[CreateUserForm] = None
    upload_key: Optional[str] = None
    submit_error: Optional[str] = None
