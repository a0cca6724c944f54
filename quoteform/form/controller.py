"""
Purchase form controller.

Owns the form state and is the only writer of it. The presentation layer
calls ``set_field`` / ``touch`` on user interaction and reads derived
state back (directly or through ``subscribe``). External data is pulled
through injected collaborators:

  - RateFeed          -> USD rates, fetched once by ``start()``
  - CountryDirectory  -> billing countries, fetched once by ``start()``
  - NavigationSink    -> receives the redirect URL on a valid ``submit()``

Neither fetch blocks field interaction: until rates arrive every quote is
computed with the fallback rate of 1.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Callable, Mapping, Sequence
from urllib.parse import parse_qs

from quoteform.catalog import BASE_CRYPTOS, FIAT_CURRENCIES
from quoteform.form.state import (
    AllFieldsTouched,
    CountriesLoaded,
    FieldChanged,
    FieldTouched,
    FormState,
    RatesLoaded,
    initial_state,
    reduce,
)
from quoteform.schemas.form import FormFields
from quoteform.schemas.reference import Asset, Country
from quoteform.services.availability_service import (
    AvailabilityResolver,
    get_availability_resolver,
)
from quoteform.services.country_service import CountryDirectory, get_country_directory
from quoteform.services.quote_service import MARKUP, Quote
from quoteform.services.rate_service import RateFeed, RateTable, get_rate_feed
from quoteform.services.submission_service import NavigationSink, build_redirect_url
from quoteform.services.validation_service import ValidationResult

logger = logging.getLogger(__name__)

AFFILIATE_PARAM = "affiliateId"

Listener = Callable[[FormState], None]


def affiliate_id_from_query(query: str | Mapping | None) -> str | None:
    """Read the inbound ``affiliateId`` parameter from a query string or mapping."""
    if not query:
        return None
    if isinstance(query, str):
        values = parse_qs(query.lstrip("?")).get(AFFILIATE_PARAM)
        return values[0] if values else None
    value = query.get(AFFILIATE_PARAM)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value or None


class FormController:
    """Purchase form state machine."""

    def __init__(
        self,
        rate_feed: RateFeed | None = None,
        country_directory: CountryDirectory | None = None,
        navigation_sink: NavigationSink | None = None,
        resolver: AvailabilityResolver | None = None,
        affiliate_id: str | None = None,
        fiat_currencies: Sequence[Asset] = FIAT_CURRENCIES,
        base_cryptos: Sequence[Asset] = BASE_CRYPTOS,
        redirect_base_url: str | None = None,
        markup: Decimal = MARKUP,
    ):
        self._rate_feed = rate_feed
        self._country_directory = country_directory
        self._navigation_sink = navigation_sink
        self._resolver = resolver or get_availability_resolver()
        self._redirect_base_url = redirect_base_url
        self._markup = markup
        self._listeners: list[Listener] = []
        self.fiat_currencies = tuple(fiat_currencies)
        self._state = initial_state(
            affiliate_id=affiliate_id,
            fiat_currencies=self.fiat_currencies,
            base_cryptos=base_cryptos,
            resolver=self._resolver,
            markup=markup,
        )

    @classmethod
    def from_query(cls, query: str | Mapping | None, **kwargs) -> "FormController":
        """Create a controller seeded from the inbound page query."""
        return cls(affiliate_id=affiliate_id_from_query(query), **kwargs)

    # ── Read access ──────────────────────────────────────────────────

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def fields(self) -> FormFields:
        return self._state.fields

    @property
    def quote(self) -> Quote:
        return self._state.quote

    @property
    def validation(self) -> ValidationResult:
        return self._state.validation

    @property
    def available_cryptos(self) -> tuple[Asset, ...]:
        return self._state.available_cryptos

    @property
    def countries(self) -> tuple[Country, ...]:
        return self._state.countries

    @property
    def rates(self) -> RateTable:
        return self._state.rates

    def visible_errors(self) -> dict[str, str]:
        return self._state.visible_errors()

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the new state after every transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event) -> FormState:
        """Apply *event* and notify subscribers."""
        self._state = reduce(self._state, event, resolver=self._resolver, markup=self._markup)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    # ── Transitions ──────────────────────────────────────────────────

    def set_field(self, key: str, value: str | None) -> FormState:
        return self.dispatch(FieldChanged(key, value))

    def touch(self, key: str) -> FormState:
        return self.dispatch(FieldTouched(key))

    def on_rates_loaded(self, rates: RateTable) -> FormState:
        return self.dispatch(RatesLoaded(rates))

    def on_countries_loaded(self, countries: Sequence[Country]) -> FormState:
        return self.dispatch(CountriesLoaded(tuple(countries)))

    # ── External data ────────────────────────────────────────────────

    async def load_rates(self) -> None:
        """Fetch the rate feed once; on failure keep quoting at the fallback rate."""
        feed = self._rate_feed or get_rate_feed()
        try:
            raw = await feed.fetch_rates()
        except Exception:
            logger.exception("Rate feed fetch failed; quotes use the fallback rate")
            return
        self.on_rates_loaded(RateTable.load(raw))

    async def load_countries(self) -> None:
        """Fetch the country directory once; on failure only the placeholder is offered."""
        directory = self._country_directory or get_country_directory()
        try:
            countries = await directory.list_countries()
        except Exception:
            logger.exception("Country directory fetch failed")
            return
        self.on_countries_loaded(countries)

    async def start(self) -> None:
        """Load rates and countries concurrently."""
        await asyncio.gather(self.load_rates(), self.load_countries())

    # ── Submission ───────────────────────────────────────────────────

    async def submit(self) -> ValidationResult:
        """
        Redirect to the purchase endpoint if the form is valid.

        Every field is marked touched so all errors become visible.
        An invalid form never reaches the navigation sink.
        """
        state = self.dispatch(AllFieldsTouched())
        result = state.validation

        if not result.is_valid:
            logger.info(
                "Submission blocked, invalid fields: %s",
                ", ".join(sorted(result.errors)),
            )
            return result

        if self._navigation_sink is None:
            raise RuntimeError("FormController has no navigation sink configured")

        url = build_redirect_url(state.fields, self._redirect_base_url)
        logger.info("Submitting purchase form for %s", state.fields.cryptocurrency)
        await self._navigation_sink.navigate(url)
        return result
