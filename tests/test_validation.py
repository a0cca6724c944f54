"""Tests for the purchase form validation engine."""

import pytest

from quoteform.schemas.form import FormFields
from quoteform.services.validation_service import ValidationResult, validate


def _with(valid_fields, **overrides):
    data = dict(valid_fields)
    data.update(overrides)
    return data


class TestValidSample:

    def test_sample_is_valid(self, valid_fields):
        result = validate(valid_fields)
        assert result.is_valid is True
        assert result.errors == {}

    def test_accepts_form_fields_model(self, valid_fields):
        result = validate(FormFields(**valid_fields))
        assert result.is_valid is True

    def test_optional_fields_never_block(self, valid_fields):
        result = validate(_with(
            valid_fields,
            client_idNum="",
            client_billAddress2="",
            client_billState="",
            client_affiliateId="",
        ))
        assert result.is_valid is True


class TestRequiredFields:

    def test_empty_form_reports_every_required_field(self):
        result = validate(FormFields())
        assert result.is_valid is False
        assert set(result.errors) == {
            "client_fullName",
            "client_email",
            "client_phoneNum",
            "client_billAddress1",
            "client_billCity",
            "client_billZipcode",
            "client_billCountry",
            "cryptocurrency",
            "currency",
            "fiat_amount",
            "crypto_wallet",
        }

    def test_missing_keys_count_as_empty(self):
        result = validate({})
        assert len(result.errors) == 11
        assert result.error_for("client_billCountry") == "Billing Country is required"

    @pytest.mark.parametrize("key, message", [
        ("client_fullName", "Full Name is required"),
        ("client_email", "Email is required"),
        ("client_phoneNum", "Phone Number is required"),
        ("client_billAddress1", "Billing Address 1 is required"),
        ("client_billCity", "Billing City is required"),
        ("client_billZipcode", "Billing Zipcode is required"),
        ("cryptocurrency", "Cryptocurrency is required"),
        ("currency", "Currency is required"),
        ("fiat_amount", "Fiat amount is required"),
        ("crypto_wallet", "Crypto wallet is required"),
    ])
    def test_required_message(self, valid_fields, key, message):
        result = validate(_with(valid_fields, **{key: ""}))
        assert result.errors == {key: message}

    def test_whitespace_only_is_empty(self, valid_fields):
        result = validate(_with(valid_fields, client_fullName="   "))
        assert result.error_for("client_fullName") == "Full Name is required"

    @pytest.mark.parametrize("country", [None, "", "Country"])
    def test_country_not_chosen(self, valid_fields, country):
        result = validate(_with(valid_fields, client_billCountry=country))
        assert result.errors == {"client_billCountry": "Billing Country is required"}

    def test_one_message_per_field(self, valid_fields):
        """An empty email reports 'required' only, not also 'invalid format'."""
        result = validate(_with(valid_fields, client_email=""))
        assert result.error_for("client_email") == "Email is required"
        assert len(result.errors) == 1


class TestFormatRules:

    @pytest.mark.parametrize("email", [
        "jane", "jane@", "@x.com", "jane@x", "jane doe@x.com", "jane@@x.com", " jane@x.com ",
    ])
    def test_invalid_email(self, valid_fields, email):
        result = validate(_with(valid_fields, client_email=email))
        assert result.error_for("client_email") == "Invalid email format"

    @pytest.mark.parametrize("email", ["jane@x.com", "j.doe+buy@mail.example.org"])
    def test_valid_email(self, valid_fields, email):
        assert validate(_with(valid_fields, client_email=email)).is_valid

    @pytest.mark.parametrize("phone", ["123456", "+123456"])
    def test_valid_phone(self, valid_fields, phone):
        assert validate(_with(valid_fields, client_phoneNum=phone)).is_valid

    @pytest.mark.parametrize("phone", ["12-34", "+", "++123", "123 456", "phone", "123+", " +123456 "])
    def test_invalid_phone(self, valid_fields, phone):
        result = validate(_with(valid_fields, client_phoneNum=phone))
        assert result.error_for("client_phoneNum") == "Invalid phone number format"


class TestFiatAmount:

    @pytest.mark.parametrize("amount", ["50", "700", "50.00", "123.45"])
    def test_within_range(self, valid_fields, amount):
        assert validate(_with(valid_fields, fiat_amount=amount)).is_valid

    def test_below_minimum(self, valid_fields):
        result = validate(_with(valid_fields, fiat_amount="49"))
        assert result.errors == {"fiat_amount": "Minimum fiat amount allowed is 50 EUR"}

    def test_above_maximum(self, valid_fields):
        result = validate(_with(valid_fields, fiat_amount="701"))
        assert result.errors == {"fiat_amount": "Maximum fiat amount allowed is 700 EUR"}

    def test_just_outside_bounds(self, valid_fields):
        assert not validate(_with(valid_fields, fiat_amount="49.99")).is_valid
        assert not validate(_with(valid_fields, fiat_amount="700.01")).is_valid

    @pytest.mark.parametrize("amount", ["abc", "NaN", "1,000", "50 EUR"])
    def test_non_numeric(self, valid_fields, amount):
        result = validate(_with(valid_fields, fiat_amount=amount))
        assert result.errors == {"fiat_amount": "Fiat amount must be a number"}

    def test_message_uses_selected_currency(self, valid_fields):
        result = validate(_with(valid_fields, currency="USD", fiat_amount="10"))
        assert result.error_for("fiat_amount") == "Minimum fiat amount allowed is 50 USD"


class TestValidationResult:

    def test_independent_evaluation(self, valid_fields):
        """Several failing fields are all reported in one pass."""
        result = validate(_with(
            valid_fields,
            client_email="bad",
            client_phoneNum="x",
            fiat_amount="5",
            crypto_wallet="",
        ))
        assert set(result.errors) == {"client_email", "client_phoneNum", "fiat_amount", "crypto_wallet"}

    def test_error_for_missing_key(self):
        assert ValidationResult().error_for("client_email") is None

    def test_wrong_shape_raises(self):
        with pytest.raises(TypeError):
            validate(["client_fullName", "Jane"])
