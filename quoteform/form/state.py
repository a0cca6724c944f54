"""
Form state transitions.

``reduce(state, event)`` is the only way a new form state is produced.
Every transition is synchronous and replaces the state as a whole, so
applying the same events to the same starting state always gives the
same result.

Derived values are refreshed inside the transition that invalidates them:
  - currency / cryptocurrency / fiat_amount  -> quote + crypto_amount
  - client_billCountry                       -> available cryptos, and the
                                                selection if it fell out
  - rates                                    -> quote + crypto_amount
  - any field                                -> validation
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Sequence

from quoteform.catalog import BASE_CRYPTOS, FIAT_CURRENCIES
from quoteform.schemas.form import FIELD_KEYS, FormFields, normalize_country
from quoteform.schemas.reference import Asset, Country
from quoteform.services.availability_service import (
    AvailabilityResolver,
    get_availability_resolver,
)
from quoteform.services.quote_service import MARKUP, Quote, build_quote
from quoteform.services.rate_service import RateTable
from quoteform.services.validation_service import ValidationResult, validate

logger = logging.getLogger(__name__)

QUOTE_DEPENDENCIES = frozenset({"currency", "cryptocurrency", "fiat_amount"})

# Computed by the form, never typed by the user
DERIVED_FIELDS = frozenset({"crypto_amount"})


class UnknownFieldError(KeyError):
    """Raised for a field key outside the form vocabulary."""
    pass


class ReadOnlyFieldError(ValueError):
    """Raised when a derived field is set directly."""
    pass


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FormState:
    """Snapshot of the purchase form and everything derived from it."""
    fields: FormFields
    rates: RateTable
    available_cryptos: tuple[Asset, ...]
    quote: Quote
    validation: ValidationResult
    countries: tuple[Country, ...] = ()
    touched: frozenset[str] = field(default_factory=frozenset)

    def visible_errors(self) -> dict[str, str]:
        """Errors of fields the user has already touched."""
        return {
            key: msg for key, msg in self.validation.errors.items()
            if key in self.touched
        }


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldChanged:
    key: str
    value: str | None


@dataclass(frozen=True)
class FieldTouched:
    key: str


@dataclass(frozen=True)
class AllFieldsTouched:
    pass


@dataclass(frozen=True)
class RatesLoaded:
    rates: RateTable


@dataclass(frozen=True)
class CountriesLoaded:
    countries: tuple[Country, ...]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _select_crypto(symbol: str, available: Sequence[Asset]) -> str:
    """Keep *symbol* if purchasable, else fall back to the first available asset."""
    names = [asset.name for asset in available]
    if symbol in names:
        return symbol
    return names[0] if names else ""


def _requote(fields: FormFields, rates: RateTable, markup: Decimal) -> tuple[FormFields, Quote]:
    quote = build_quote(fields.fiat_amount, fields.currency, fields.cryptocurrency, rates, markup)
    return fields.model_copy(update={"crypto_amount": quote.display_amount}), quote


def initial_state(
    affiliate_id: str | None = None,
    fiat_currencies: Sequence[Asset] = FIAT_CURRENCIES,
    base_cryptos: Sequence[Asset] = BASE_CRYPTOS,
    resolver: AvailabilityResolver | None = None,
    rates: RateTable | None = None,
    markup: Decimal = MARKUP,
) -> FormState:
    """Default form state, with derived values already computed."""
    resolver = resolver or get_availability_resolver()
    if rates is None:
        rates = RateTable.empty()
    available = resolver.resolve(None)

    preset_crypto = base_cryptos[0].name if base_cryptos else ""
    fields = FormFields(
        currency=fiat_currencies[0].name if fiat_currencies else "",
        cryptocurrency=_select_crypto(preset_crypto, available),
        client_affiliateId=affiliate_id or "",
    )
    fields, quote = _requote(fields, rates, markup)

    return FormState(
        fields=fields,
        rates=rates,
        available_cryptos=available,
        quote=quote,
        validation=validate(fields),
    )


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _change_field(
    state: FormState,
    key: str,
    value: str | None,
    resolver: AvailabilityResolver,
    markup: Decimal,
) -> FormState:
    if key not in FIELD_KEYS:
        raise UnknownFieldError(key)
    if key in DERIVED_FIELDS:
        raise ReadOnlyFieldError(f"{key} is computed and cannot be set directly")

    if key == "client_billCountry":
        if value is not None and not isinstance(value, str):
            raise TypeError(f"{key} must be a string or None, got {type(value).__name__}")
        value = normalize_country(value)
    elif not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")

    updates: dict[str, str | None] = {key: value}
    changed = {key}
    available = state.available_cryptos

    if key == "client_billCountry":
        available = resolver.resolve(value)

    current = value if key == "cryptocurrency" else state.fields.cryptocurrency
    selected = _select_crypto(current, available)
    if selected != current:
        if key == "cryptocurrency":
            logger.warning("%s is not available here; selecting %s", current, selected)
        else:
            logger.info("Billing country changed; cryptocurrency reset to %s", selected)
    if selected != state.fields.cryptocurrency:
        changed.add("cryptocurrency")
    updates["cryptocurrency"] = selected

    fields = state.fields.model_copy(update=updates)
    quote = state.quote
    if changed & QUOTE_DEPENDENCIES:
        fields, quote = _requote(fields, state.rates, markup)

    return replace(
        state,
        fields=fields,
        available_cryptos=available,
        quote=quote,
        validation=validate(fields),
    )


def reduce(
    state: FormState,
    event,
    resolver: AvailabilityResolver | None = None,
    markup: Decimal = MARKUP,
) -> FormState:
    """Apply *event* to *state* and return the new state."""
    if isinstance(event, FieldChanged):
        return _change_field(
            state, event.key, event.value, resolver or get_availability_resolver(), markup
        )

    if isinstance(event, FieldTouched):
        if event.key not in FIELD_KEYS:
            raise UnknownFieldError(event.key)
        return replace(state, touched=state.touched | {event.key})

    if isinstance(event, AllFieldsTouched):
        return replace(state, touched=frozenset(FIELD_KEYS))

    if isinstance(event, RatesLoaded):
        fields, quote = _requote(state.fields, event.rates, markup)
        return replace(
            state,
            fields=fields,
            rates=event.rates,
            quote=quote,
            validation=validate(fields),
        )

    if isinstance(event, CountriesLoaded):
        return replace(state, countries=tuple(event.countries))

    raise TypeError(f"Unsupported form event: {type(event).__name__}")
