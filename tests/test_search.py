"""Tests for weighted fuzzy search over reference data."""

from pathlib import Path

import pytest

from app.config import PACKAGE_DIR
from app.icons.models import ReferenceEntry
from app.icons.search import (
    CRYPTO_KEYS,
    EPSILON,
    FuzzyIndex,
    bitap_search,
    build_crypto_index,
    build_currency_index,
    field_norm,
    fuzzy_score,
)
from app.icons.sources import load_cryptos, load_currencies

DATA_DIR: Path = PACKAGE_DIR / "data"


@pytest.fixture(scope="module")
def currencies():
    return load_currencies(DATA_DIR / "forex.yaml")


@pytest.fixture(scope="module")
def cryptos():
    return load_cryptos(DATA_DIR / "crypto_manifest.json")


def keys(hits):
    return [h.entry.key for h in hits]


class TestFuzzyScore:
    """Single-field bitap scoring."""

    def test_identical_is_zero(self):
        """Equal strings score zero."""
        assert fuzzy_score("Euro", "euro") == 0.0

    def test_exact_substring_scored_by_location(self):
        """Exact matches score by distance from the start."""
        assert fuzzy_score("us dollar", "dollar") == pytest.approx(0.03)

    def test_exact_prefix_is_floored(self):
        """Exact prefixes get the minimum score."""
        assert fuzzy_score("Ethereum", "ether") == pytest.approx(0.001)

    def test_missing_character_tolerated(self):
        """A dropped letter still matches."""
        score = fuzzy_score("bitcoin", "bitcon")
        assert score is not None
        assert 0 < score <= 0.3

    def test_unrelated_text(self):
        """Unrelated text does not match."""
        assert fuzzy_score("Swiss Franc", "zzzz") is None

    def test_empty_pattern(self):
        """An empty pattern never matches."""
        assert fuzzy_score("anything", "") is None

    def test_long_pattern_is_chunked(self):
        """Patterns over 32 chars are scored chunk by chunk and averaged."""
        pattern = "a rather long reference name that exceeds"
        assert len(pattern) > 32
        score = fuzzy_score(pattern + " extra words", pattern)
        assert score is not None
        assert score < 0.01

    def test_bitap_reports_no_match(self):
        """Bitap reports misses."""
        is_match, _ = bitap_search("abc", "xyz")
        assert is_match is False


class TestFieldNorm:
    def test_single_token(self):
        """One token has norm 1."""
        assert field_norm("Bitcoin") == 1.0

    def test_two_tokens(self):
        """Two tokens have norm 1/sqrt(2)."""
        assert field_norm("Bitcoin Cash") == 0.707

    def test_extra_spaces_ignored(self):
        """Repeated spaces do not add tokens."""
        assert field_norm("  US   Dollar ") == 0.707


class TestCurrencySearch:
    """Code, name and country aliases with equal weights."""

    @pytest.fixture
    def index(self, currencies):
        return build_currency_index(currencies)

    def test_exact_code_ranks_first(self, index):
        """Exact code beats names and aliases."""
        hits = index.search("USD")
        assert keys(hits)[0] == "USD"

    def test_case_insensitive(self, index):
        """Queries ignore case."""
        assert keys(index.search("eur"))[0] == "EUR"

    def test_country_alias(self, index):
        """Country aliases resolve to their currency."""
        assert keys(index.search("Japan"))[0] == "JPY"

    def test_typo_in_name(self, index):
        """A misspelled name still finds the currency."""
        assert keys(index.search("dolar"))[0] == "USD"

    def test_results_limited(self, index):
        """At most five results."""
        assert len(index.search("a")) <= 5

    def test_scores_ascending(self, index):
        """Best match first."""
        scores = [h.score for h in index.search("dollar")]
        assert scores == sorted(scores)

    def test_no_match(self, index):
        """Nonsense returns nothing."""
        assert index.search("qqqqqqqq") == []

    def test_whitespace_query_is_empty(self, index, currencies):
        """Whitespace-only queries behave like empty ones."""
        hits = index.search("   ")
        assert len(hits) == len(currencies)
        assert all(h.score is None for h in hits)


class TestCryptoSearch:
    """Symbol weighted 0.7, name 0.3."""

    @pytest.fixture
    def index(self, cryptos):
        return build_crypto_index(cryptos)

    def test_exact_symbol(self, index):
        """Exact symbol ranks first."""
        assert keys(index.search("eth"))[0] == "ETH"

    def test_name_prefix(self, index):
        """Name prefixes find the coin."""
        assert keys(index.search("ether"))[0] == "ETH"

    def test_typo_prefers_shorter_name(self, index):
        """'Bitcoin' outranks 'Bitcoin Cash' through the field norm."""
        hits = keys(index.search("bitcon"))
        assert hits[0] == "BTC"
        assert "BCH" in hits

    def test_exact_symbol_score_is_tiny(self, index):
        """Exact symbol match scores epsilon to the symbol weight."""
        hit = index.search("BTC")[0]
        assert hit.entry.key == "BTC"
        assert hit.score <= EPSILON ** 0.7 * 1.0001


class TestFuzzyIndex:
    def _entries(self):
        return [
            ReferenceEntry(key="AA1", display_name="Same Name"),
            ReferenceEntry(key="AA2", display_name="Same Name"),
            ReferenceEntry(key="ZZ", display_name="Other"),
        ]

    def test_ties_keep_collection_order(self):
        """Equal scores keep data file order."""
        index = build_crypto_index(self._entries())
        assert keys(index.search("same"))[:2] == ["AA1", "AA2"]

    def test_empty_query_all(self):
        """Mode "all" lists everything unranked."""
        index = build_crypto_index(self._entries(), empty_query_mode="all")
        hits = index.search("")
        assert keys(hits) == ["AA1", "AA2", "ZZ"]
        assert all(h.score is None for h in hits)

    def test_empty_query_all_is_not_truncated(self, currencies):
        """Mode "all" ignores the result limit."""
        index = build_currency_index(currencies, limit=5)
        assert len(index.search("")) == len(currencies) > 5

    def test_empty_query_none(self):
        """Mode "none" returns nothing."""
        index = build_crypto_index(self._entries(), empty_query_mode="none")
        assert index.search("") == []
        assert index.search(None) == []

    def test_invalid_empty_query_mode(self):
        """Unknown empty-query modes are rejected."""
        with pytest.raises(ValueError):
            build_crypto_index(self._entries(), empty_query_mode="everything")

    def test_custom_limit(self, currencies):
        """The limit is configurable."""
        index = build_currency_index(currencies, limit=2)
        assert len(index.search("dollar")) <= 2

    def test_entry_without_match_scores_none(self):
        """Entries with no matching key score None."""
        index = build_crypto_index(self._entries())
        assert index.score_entry(self._entries()[2], "same") is None

    def test_len_and_entries(self):
        """The index exposes its entries."""
        index = FuzzyIndex(self._entries(), CRYPTO_KEYS)
        assert len(index) == 3
        assert index.entries[0].key == "AA1"
