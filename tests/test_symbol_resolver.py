"""
Tests for free-text symbol resolution.
Pure functions; no IO required.
"""

import pytest

from src.domain.services.symbol_resolver import SYMBOL_SYNONYMS, resolve_symbol, synonym_for


class TestCanonicalPattern:
    @pytest.mark.parametrize("text", ["eurusd", "BTCUSD", "XauUsd", "maticusd", "abcdefusd"])
    def test_canonical_inputs_are_upper_cased(self, text):
        assert resolve_symbol(text) == text.upper()

    def test_canonical_input_is_trimmed(self):
        assert resolve_symbol("  ethusd ") == "ETHUSD"

    def test_too_long_prefix_is_not_canonical(self):
        # seven letters before USD falls through to pass-through
        assert resolve_symbol("abcdefgusd") == "ABCDEFGUSD"


class TestSynonyms:
    @pytest.mark.parametrize("alias", sorted(SYMBOL_SYNONYMS))
    def test_every_alias_maps_to_table_value(self, alias):
        assert resolve_symbol(alias) == SYMBOL_SYNONYMS[alias]

    @pytest.mark.parametrize("text", ["BTC", " btc ", "Bitcoin", "\tBITCOIN\n"])
    def test_aliases_ignore_case_and_whitespace(self, text):
        assert resolve_symbol(text) == "BTCUSD"

    def test_index_aliases(self):
        assert resolve_symbol("S&P") == "US500"
        assert resolve_symbol("dax") == "GER40"

    def test_synonym_for_reports_hit_or_none(self):
        assert synonym_for(" Gold ") == "XAUUSD"
        assert synonym_for("EURUSD") is None


class TestPassThrough:
    def test_unknown_symbol_is_upper_cased(self):
        assert resolve_symbol("aapl") == "AAPL"

    def test_empty_input(self):
        assert resolve_symbol("") == ""
