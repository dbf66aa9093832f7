"""State and submit flow for the create-user form."""

import asyncio
import json
import re
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from profile_form.models.form_models import CreateUserForm
from profile_form.models.result_models import (
    FieldError,
    FieldErrorKind,
    SubmissionOutcome,
    SubmissionStatus,
)
from profile_form.services.form_schema import validate_form
from profile_form.services.message_catalog import MessageCatalog, get_message_catalog
from profile_form.services.storage_service import StorageService, UploadError
from profile_form.utils.logger import get_logger

logger = get_logger(__name__)

SCALAR_FIELDS = ("avatar", "name", "email", "password")
ROW_FIELDS = ("title", "knowledge")

_BUSY_STATES = (SubmissionStatus.VALIDATING, SubmissionStatus.UPLOADING)
_ROW_ERROR_PATH = re.compile(r"^techs\[(\d+)\](.*)$")


class TechRow(BaseModel):
    """One editable technology row."""
    
    row_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: Any = ""
    knowledge: Any = 0
    
    def as_input(self) -> Dict[str, Any]:
        return {"title": self.title, "knowledge": self.knowledge}


def parse_field_path(path: str) -> Tuple[str, Optional[int], Optional[str]]:
    """
    Split a field path into (field, row index, row attribute).
    
    Accepts "name" style paths and "techs.<index>.<title|knowledge>".
    
    Raises:
        KeyError: If the path doesn't name a form field
    """
    parts = path.split(".")
    if len(parts) == 1 and parts[0] in SCALAR_FIELDS:
        return parts[0], None, None
    
    if len(parts) == 3 and parts[0] == "techs" and parts[2] in ROW_FIELDS:
        try:
            index = int(parts[1])
        except ValueError:
            raise KeyError(f"Unknown field path: {path}") from None
        return "techs", index, parts[2]
    
    raise KeyError(f"Unknown field path: {path}")


class FieldBinding:
    """Connects one input widget to a value in the form."""
    
    def __init__(
        self,
        controller: "FormController",
        path: str,
        field: str,
        row_id: Optional[str] = None,
        attr: Optional[str] = None
    ):
        self.controller = controller
        self.path = path
        self.field = field
        self.row_id = row_id
        self.attr = attr
    
    @property
    def index(self) -> Optional[int]:
        """Current position of the bound row, looked up on every access."""
        if self.row_id is None:
            return None
        return self.controller.index_of(self.row_id)
    
    def get(self) -> Any:
        if self.row_id is None:
            return self.controller.values[self.field]
        return getattr(self.controller.row(self.row_id), self.attr)
    
    def set(self, value: Any) -> None:
        if self.row_id is None:
            self.controller.values[self.field] = value
        else:
            setattr(self.controller.row(self.row_id), self.attr, value)


class FormController:
    """
    Holds the live form input, the technology rows and the field errors.
    
    Values are only validated on submit. Rows are identified by a generated
    row id; indices are recomputed from the current list whenever needed.
    """
    
    def __init__(
        self,
        storage: Optional[StorageService] = None,
        catalog: Optional[MessageCatalog] = None,
        upload_timeout: Optional[float] = None
    ):
        """
        Initialize the form controller.
        
        Args:
            storage: Upload collaborator (a StorageService from settings if None)
            catalog: Message catalog (the bundled one if None)
            upload_timeout: Seconds to wait for the upload (storage timeout if None)
        """
        self.storage = storage or StorageService()
        self.catalog = catalog or get_message_catalog()
        self.upload_timeout = upload_timeout if upload_timeout is not None else self.storage.timeout
        
        self.values: Dict[str, Any] = {
            "avatar": [],
            "name": "",
            "email": "",
            "password": "",
        }
        self.techs: List[TechRow] = []
        self.errors: Dict[str, FieldError] = {}
        self.status = SubmissionStatus.IDLE
        self.last_submission: Optional[CreateUserForm] = None
        self.submit_error: Optional[str] = None
    
    # Field access
    
    def register_field(self, path: str) -> FieldBinding:
        """
        Bind an input to a field path.
        
        Row paths are pinned to the row currently at that index, so the
        binding follows the row if earlier rows are removed.
        
        Raises:
            KeyError: If the path is not a form field
            IndexError: If the row index doesn't exist
        """
        field, index, attr = parse_field_path(path)
        if index is None:
            return FieldBinding(self, path, field)
        
        if not 0 <= index < len(self.techs):
            raise IndexError(f"No tech row at index {index}")
        return FieldBinding(self, path, field, row_id=self.techs[index].row_id, attr=attr)
    
    def set_value(self, path: str, value: Any) -> None:
        self.register_field(path).set(value)
    
    def get_value(self, path: str) -> Any:
        return self.register_field(path).get()
    
    def row(self, row_id: str) -> TechRow:
        for tech in self.techs:
            if tech.row_id == row_id:
                return tech
        raise KeyError(f"Tech row {row_id} no longer exists")
    
    def index_of(self, row_id: str) -> int:
        for index, tech in enumerate(self.techs):
            if tech.row_id == row_id:
                return index
        raise KeyError(f"Tech row {row_id} no longer exists")
    
    # Dynamic list
    
    def add_tech(self) -> TechRow:
        """Append an empty technology row."""
        tech = TechRow(title="", knowledge=0)
        self.techs.append(tech)
        return tech
    
    def remove_tech(self, index: int) -> TechRow:
        """
        Remove the technology row at index; later rows move up by one.
        
        Errors of the removed row are dropped; errors of later rows move
        up with their rows.
        
        Raises:
            IndexError: If there is no row at index
        """
        if not 0 <= index < len(self.techs):
            raise IndexError(f"No tech row at index {index}")
        
        tech = self.techs.pop(index)
        errors: Dict[str, FieldError] = {}
        for path, error in self.errors.items():
            match = _ROW_ERROR_PATH.match(path)
            if match is None:
                errors[path] = error
                continue
            
            row_index = int(match.group(1))
            if row_index < index:
                errors[path] = error
            elif row_index > index:
                errors[f"techs[{row_index - 1}]{match.group(2)}"] = error
        self.errors = errors
        return tech
    
    # State
    
    def snapshot(self) -> Dict[str, Any]:
        """Raw form input as it stands."""
        return {**self.values, "techs": [tech.as_input() for tech in self.techs]}
    
    @property
    def is_busy(self) -> bool:
        return self.status in _BUSY_STATES
    
    def error_for(self, path: str) -> Optional[str]:
        error = self.errors.get(path)
        return error.message if error else None
    
    @property
    def output(self) -> str:
        """The last successful submission as pretty JSON, or an empty string."""
        if self.last_submission is None:
            return ""
        return json.dumps(
            self.last_submission.model_dump(mode="json"),
            indent=2,
            ensure_ascii=False
        )
    
    # Submit
    
    async def submit(self, raw_input: Optional[Mapping[str, Any]] = None) -> SubmissionOutcome:
        """
        Validate the form and upload the avatar.
        
        Args:
            raw_input: Values to submit (the current form state if None)
            
        Returns:
            SubmissionOutcome: What happened; ignored calls have accepted=False
        """
        if self.is_busy:
            logger.warning("Submit ignored: a submission is already %s", self.status.value)
            return SubmissionOutcome(accepted=False, status=self.status, errors=dict(self.errors))
        
        raw = raw_input if raw_input is not None else self.snapshot()
        self.status = SubmissionStatus.VALIDATING
        self.submit_error = None
        
        try:
            result = validate_form(raw, self.catalog)
            if not result.ok:
                self.errors = result.errors
                self.status = SubmissionStatus.INVALID
                logger.info("Validation failed for: %s", ", ".join(sorted(result.errors)))
                return SubmissionOutcome(accepted=True, status=self.status, errors=dict(self.errors))
            
            self.errors = {}
            form = result.value
            
            self.status = SubmissionStatus.UPLOADING
            try:
                key = await asyncio.wait_for(
                    self.storage.upload(form.avatar.name, form.avatar.content, form.avatar.content_type),
                    timeout=self.upload_timeout
                )
            except (UploadError, asyncio.TimeoutError) as e:
                logger.error("Avatar upload failed: %s", str(e) or "timed out")
                self.status = SubmissionStatus.UPLOAD_FAILED
                self.submit_error = self.catalog.lookup(
                    "avatar",
                    FieldErrorKind.UPLOAD_FAILURE.value,
                    "Upload failed, please retry"
                )
                return SubmissionOutcome(
                    accepted=True,
                    status=self.status,
                    submit_error=self.submit_error
                )
            
            self.last_submission = form
            self.status = SubmissionStatus.UPLOADED
            logger.info("Submission uploaded avatar as %s", key)
            return SubmissionOutcome(
                accepted=True,
                status=self.status,
                output=form,
                upload_key=key
            )
        finally:
            if self.is_busy:
                self.status = SubmissionStatus.IDLE
