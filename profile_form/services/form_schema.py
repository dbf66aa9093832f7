"""Validation of raw form input against the create-user schema."""

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from profile_form.models.form_models import MIN_TECHS, CreateUserForm
from profile_form.models.result_models import (
    FieldError,
    FieldErrorKind,
    ValidationFailure,
    ValidationResult,
    ValidationSuccess,
)
from profile_form.services.message_catalog import MessageCatalog, get_message_catalog


# What a missing key means for fields that aren't plain text
_MISSING_KINDS = {
    "avatar": FieldErrorKind.MISSING_FILE,
}

_KIND_VALUES = {kind.value for kind in FieldErrorKind}


def error_path(loc: Sequence[Union[str, int]]) -> str:
    """
    Render a pydantic error location as a field path.
    
    ("techs", 1, "title") becomes "techs[1].title".
    """
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def _catalog_key(loc: Sequence[Union[str, int]]) -> str:
    """
    Catalog key for an error location: indices dropped, so
    ("techs", 1, "title") is "techs.title". A whole list item is "techs[]".
    """
    key = ".".join(str(part) for part in loc if not isinstance(part, int))
    if loc and isinstance(loc[-1], int):
        key += "[]"
    return key


def _error_kind(error_type: str, field: str) -> FieldErrorKind:
    if error_type == "missing":
        return _MISSING_KINDS.get(field, FieldErrorKind.REQUIRED)
    if error_type == "too_short" and field == "techs":
        # pydantic's own list length check
        return FieldErrorKind.TOO_FEW
    if error_type in _KIND_VALUES:
        return FieldErrorKind(error_type)
    return FieldErrorKind.INVALID_FORMAT


def _collect_errors(exc: ValidationError, catalog: MessageCatalog) -> Dict[str, FieldError]:
    errors: Dict[str, FieldError] = {}
    for item in exc.errors():
        loc: Tuple[Union[str, int], ...] = tuple(item["loc"])
        if loc and loc[0] == "avatar":
            # The avatar is a single value; nested file attributes report on the field
            loc = ("avatar",)
        
        field = _catalog_key(loc)
        kind = _error_kind(item["type"], field)
        message = catalog.lookup(field, kind.value, item["msg"])
        errors.setdefault(error_path(loc), FieldError(kind=kind, message=message))
    return errors


def validate_form(raw: Mapping[str, Any], catalog: Optional[MessageCatalog] = None) -> ValidationResult:
    """
    Validate raw form input.
    
    Every failing field is reported, not just the first one.
    
    Args:
        raw: Raw values keyed by field name (avatar, name, email, password, techs)
        catalog: Message catalog (uses the bundled one if None)
        
    Returns:
        ValidationSuccess with the transformed data, or ValidationFailure
        with a field path -> error mapping
    """
    catalog = catalog or get_message_catalog()
    
    try:
        value = CreateUserForm.model_validate(dict(raw))
    except ValidationError as e:
        errors = _collect_errors(e, catalog)
    else:
        return ValidationSuccess(value=value)
    
    # Row errors stop pydantic before it checks the list length
    techs = raw.get("techs")
    if "techs" not in errors and isinstance(techs, (list, tuple)) and len(techs) < MIN_TECHS:
        kind = FieldErrorKind.TOO_FEW
        errors["techs"] = FieldError(
            kind=kind,
            message=catalog.lookup("techs", kind.value, f"At least {MIN_TECHS} items are required")
        )
    
    return ValidationFailure(errors=errors)
