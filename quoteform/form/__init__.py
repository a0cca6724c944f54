"""
Form state and controller.
"""

from quoteform.form.controller import FormController, affiliate_id_from_query
from quoteform.form.state import (
    FormState,
    ReadOnlyFieldError,
    UnknownFieldError,
    initial_state,
    reduce,
)

__all__ = [
    "FormController",
    "FormState",
    "ReadOnlyFieldError",
    "UnknownFieldError",
    "affiliate_id_from_query",
    "initial_state",
    "reduce",
]
