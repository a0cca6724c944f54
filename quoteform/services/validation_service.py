"""
Validation engine for the purchase form.

Runs the ``PurchaseRequest`` schema over a whole field set and flattens
pydantic's error list into one message per failing field. Touch state is
not considered here; callers decide which errors to show.
"""

from dataclasses import dataclass, field
from typing import Mapping

from pydantic import ValidationError

from quoteform.schemas.form import FormFields, PurchaseRequest


@dataclass(frozen=True)
class ValidationResult:
    """Per-field error messages for one field set."""
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_for(self, key: str) -> str | None:
        return self.errors.get(key)


def validate(fields: FormFields | Mapping) -> ValidationResult:
    """
    Validate every field independently.

    Raises TypeError when *fields* is not a field set or mapping.
    """
    if isinstance(fields, FormFields):
        data = fields.model_dump()
    elif isinstance(fields, Mapping):
        data = dict(fields)
    else:
        raise TypeError(f"Cannot validate {type(fields).__name__}; expected a field mapping")

    try:
        PurchaseRequest.model_validate(data)
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for err in exc.errors():
            key = str(err["loc"][0]) if err["loc"] else "__root__"
            errors.setdefault(key, err["msg"])
        return ValidationResult(errors=errors)

    return ValidationResult()
