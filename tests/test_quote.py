"""Tests for the quote calculator."""

from decimal import Decimal

import pytest

from quoteform.services.quote_service import (
    MARKUP,
    ZERO_QUOTE,
    build_quote,
    compute_crypto_amount,
    format_crypto_amount,
)
from quoteform.services.rate_service import RateTable


class TestComputeCryptoAmount:

    def test_worked_example(self):
        """100 EUR @1.1, BTC @50000, 5% markup -> 110 / 52500."""
        amount = compute_crypto_amount("100", Decimal("1.1"), Decimal("50000"), Decimal("0.05"))
        assert amount == Decimal("0.0020952")

    def test_fallback_rates(self):
        """Both rates at 1: 100 / 1.05."""
        amount = compute_crypto_amount("100", Decimal("1"), Decimal("1"), Decimal("0.05"))
        assert amount == Decimal("95.2380952")

    def test_default_markup_is_five_percent(self):
        assert MARKUP == Decimal("0.05")
        assert compute_crypto_amount("105", Decimal("1"), Decimal("1")) == Decimal("100.0000000")

    def test_rounds_to_seven_places(self):
        amount = compute_crypto_amount("1", Decimal("1"), Decimal("3"), Decimal("0"))
        assert amount == Decimal("0.3333333")
        assert amount.as_tuple().exponent == -7

    @pytest.mark.parametrize("value", ["", "0", "abc", "   ", None, "-20", "NaN", "1,000"])
    def test_not_yet_computable_amounts_give_zero(self, value):
        amount = compute_crypto_amount(value, Decimal("1.1"), Decimal("50000"))
        assert amount == Decimal("0")

    def test_zero_amount_any_rates(self):
        for fiat_rate, crypto_rate in [("1", "1"), ("0.5", "70000"), ("3", "0.01")]:
            assert compute_crypto_amount(0, Decimal(fiat_rate), Decimal(crypto_rate)) == 0

    def test_non_positive_effective_rate_gives_zero(self):
        assert compute_crypto_amount("100", Decimal("1"), Decimal("0")) == 0
        assert compute_crypto_amount("100", Decimal("1"), Decimal("1"), Decimal("-1")) == 0

    def test_deterministic(self):
        first = compute_crypto_amount("123.45", Decimal("1.1"), Decimal("2500"))
        second = compute_crypto_amount("123.45", Decimal("1.1"), Decimal("2500"))
        assert first == second

    def test_monotonic_in_fiat_amount(self):
        amounts = [compute_crypto_amount(str(x), Decimal("1.1"), Decimal("2500")) for x in range(0, 1000, 37)]
        assert amounts == sorted(amounts)

    def test_non_increasing_in_crypto_rate(self):
        rates = [Decimal(r) for r in ("0.5", "1", "10", "2500", "50000", "90000")]
        amounts = [compute_crypto_amount("250", Decimal("1.1"), r) for r in rates]
        assert amounts == sorted(amounts, reverse=True)

    def test_large_amount_is_quoted_exactly(self):
        """Results beyond default decimal precision still round to 7 places."""
        amount = compute_crypto_amount("1e30", Decimal("1"), Decimal("1"))
        assert amount == Decimal("952380952380952380952380952380.9523810")
        assert amount.as_tuple().exponent == -7

    def test_tiny_crypto_rate(self):
        amount = compute_crypto_amount("700", Decimal("1"), Decimal("1E-20"), Decimal("0"))
        assert amount == Decimal("70000000000000000000000.0000000")

    @pytest.mark.parametrize("value", ["1e200", "1e999999"])
    def test_unrepresentable_amount_gives_zero(self, value):
        assert compute_crypto_amount(value, Decimal("1.1"), Decimal("50000")) == 0


class TestBuildQuote:

    def test_quote_with_loaded_rates(self, loaded_rates):
        quote = build_quote("100", "EUR", "BTC", loaded_rates)
        assert quote.fiat_amount_usd == Decimal("110.0")
        assert quote.crypto_amount == Decimal("0.0020952")
        assert quote.crypto_amount_usd == Decimal("0.0020952")
        assert quote.display_amount == "0.0020952"

    def test_quote_with_unloaded_rates(self):
        quote = build_quote("100", "EUR", "BTC", RateTable.empty())
        assert quote.fiat_amount_usd == Decimal("100")
        assert quote.display_amount == "95.2380952"

    def test_missing_crypto_rate_uses_fallback(self, loaded_rates):
        """Unknown crypto symbol is quoted at rate 1 rather than failing."""
        quote = build_quote("100", "EUR", "DOGE", loaded_rates)
        assert quote.crypto_amount == Decimal("104.7619048")

    def test_empty_amount_gives_zero_quote(self, loaded_rates):
        quote = build_quote("", "EUR", "BTC", loaded_rates)
        assert quote == ZERO_QUOTE
        assert quote.display_amount == "0.0000000"


class TestFormatCryptoAmount:

    def test_zero(self):
        assert format_crypto_amount(Decimal("0")) == "0.0000000"

    def test_pads_to_seven_places(self):
        assert format_crypto_amount(Decimal("1.5")) == "1.5000000"

    def test_large_value_not_scientific(self):
        assert format_crypto_amount(Decimal("1E+3")) == "1000.0000000"

    def test_keeps_digits_beyond_default_precision(self):
        assert format_crypto_amount(Decimal("1E+30")) == "1" + "0" * 30 + ".0000000"
