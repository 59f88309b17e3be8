"""
Unit Tests for the Currency Catalog and Currency Matrix

Run with:
    pytest tests/unit/test_currency.py -v
"""

import pytest

from core.currency import (
    Currency,
    all_currencies,
    currency_for_code,
    currency_for_locale,
    region_from_locale,
)
from core.currency_matrix import (
    build_currency_matrix,
    matrix_from_codes,
    normalize_currency_matrix,
    sort_base_currencies,
)


def c(code):
    return currency_for_code(code)


class TestCurrency:
    """Currency identity is the code"""

    def test_equality_uses_code_only(self):
        a = Currency(code="BTC", display_name="Bitcoin")
        b = Currency(code="BTC", display_name="Something else")
        assert a == b
        assert hash(a) == hash(b)

    def test_different_codes_with_same_name_differ(self):
        assert c("BTC") != c("XBT")
        assert c("BTC").display_name == c("XBT").display_name

    def test_currency_is_immutable(self):
        with pytest.raises(Exception):
            c("BTC").code = "ETH"

    def test_str_is_code(self):
        assert str(c("EUR")) == "EUR"


class TestCatalog:

    def test_all_currencies_keeps_catalog_order(self):
        codes = [currency.code for currency in all_currencies()]
        assert codes[:3] == ["BTC", "XBT", "ETH"]
        assert codes == [currency.code for currency in all_currencies()]

    def test_codes_are_unique(self):
        codes = [currency.code for currency in all_currencies()]
        assert len(codes) == len(set(codes))

    def test_lookup_is_case_insensitive(self):
        assert c("btc") == c("BTC")
        assert c(" usd ") == c("USD")

    @pytest.mark.parametrize("code", [None, "", "DOGECOIN"])
    def test_unknown_code_is_none(self, code):
        assert currency_for_code(code) is None


class TestLocaleMapping:

    @pytest.mark.parametrize("locale_name,region", [
        ("en_US", "US"),
        ("de_DE.UTF-8", "DE"),
        ("en-GB", "GB"),
        ("sr_RS@latin", "RS"),
        ("zh_Hans_CN", "CN"),
    ])
    def test_region_parsing(self, locale_name, region):
        assert region_from_locale(locale_name) == region

    @pytest.mark.parametrize("locale_name", [None, "", "C", "POSIX", "en"])
    def test_locale_without_region(self, locale_name):
        assert region_from_locale(locale_name) is None
        assert currency_for_locale(locale_name) is None

    @pytest.mark.parametrize("locale_name,code", [
        ("en_US", "USD"),
        ("de_DE", "EUR"),
        ("fr_FR.UTF-8", "EUR"),
        ("ja_JP", "JPY"),
        ("ko_KR", "KRW"),
        ("en_GB", "GBP"),
    ])
    def test_locale_to_currency(self, locale_name, code):
        assert currency_for_locale(locale_name) == c(code)

    def test_unmapped_region_is_none(self):
        assert currency_for_locale("pt_BR") is None


class TestCurrencyMatrix:

    def test_build_dedups_and_keeps_order(self):
        matrix = build_currency_matrix([
            (c("BTC"), c("USD")),
            (c("ETH"), c("USD")),
            (c("BTC"), c("EUR")),
            (c("BTC"), c("USD")),
        ])
        assert list(matrix.keys()) == [c("BTC"), c("ETH")]
        assert matrix[c("BTC")] == [c("USD"), c("EUR")]

    def test_self_pairs_are_dropped(self):
        assert build_currency_matrix([(c("BTC"), c("BTC"))]) is None

    def test_no_pairs_is_none(self):
        assert build_currency_matrix([]) is None

    def test_from_codes_skips_unknown_currencies(self):
        matrix = matrix_from_codes([("BTC", "USD"), ("FOO", "USD"), ("ETH", "BAR")])
        assert matrix == {c("BTC"): [c("USD")]}

    def test_normalize_drops_empty_quote_lists(self):
        matrix = normalize_currency_matrix({c("BTC"): [], c("ETH"): [c("USD"), c("USD")]})
        assert matrix == {c("ETH"): [c("USD")]}

    def test_normalize_empty_is_none(self):
        assert normalize_currency_matrix({}) is None
        assert normalize_currency_matrix(None) is None
        assert normalize_currency_matrix({c("BTC"): []}) is None

    def test_sort_pins_bitcoin_then_display_name(self):
        ordered = sort_base_currencies([c("LTC"), c("AUD"), c("XBT"), c("ETH"), c("BTC")])
        assert ordered == [c("BTC"), c("XBT"), c("AUD"), c("ETH"), c("LTC")]
