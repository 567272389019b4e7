"""Weighted fuzzy search over currency and crypto reference data.

Approximate matching uses the bitap algorithm with error levels (the
scoring model popularized by Fuse.js), so typos, transpositions, missing
characters and partial prefixes still match:

    key score   = errors / len(pattern) + |match_location - location| / distance
                  (0 for an exact match, floored at 0.001 otherwise)
    entry score = prod(key_score ** (weight * norm))   over matching key values

where weights are normalized to sum to 1 and norm = 1/sqrt(tokens in value)
favours short fields. Lower is better; entries with no matching key are
dropped. Results are ranked by score, ties keep collection order.
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from app.icons.models import ReferenceEntry

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 32
DEFAULT_THRESHOLD = 0.3
DEFAULT_LOCATION = 0
DEFAULT_DISTANCE = 100
DEFAULT_LIMIT = 5
MIN_SCORE = 0.001
EPSILON = sys.float_info.epsilon

EMPTY_QUERY_ALL = "all"
EMPTY_QUERY_NONE = "none"


@dataclass(frozen=True)
class SearchKey:
    """A searchable field of a ReferenceEntry."""

    name: str
    getter: Callable[[ReferenceEntry], Union[str, Sequence[str]]]
    weight: float = 1.0


@dataclass(frozen=True)
class SearchHit:
    """A search result; score is None for unranked (empty query) listings."""

    entry: ReferenceEntry
    score: Optional[float]


# =============================================================================
# Bitap
# =============================================================================


def _pattern_alphabet(pattern: str) -> dict[str, int]:
    mask: dict[str, int] = {}
    length = len(pattern)
    for i, char in enumerate(pattern):
        mask[char] = mask.get(char, 0) | (1 << (length - i - 1))
    return mask


def _score(pattern_len: int, errors: int, current: int, expected: int, distance: int) -> float:
    accuracy = errors / pattern_len
    proximity = abs(expected - current)
    if not distance:
        return 1.0 if proximity else accuracy
    return accuracy + proximity / distance


def _at(bits: list[int], index: int) -> int:
    return bits[index] if 0 <= index < len(bits) else 0


def bitap_search(
    text: str,
    pattern: str,
    threshold: float = DEFAULT_THRESHOLD,
    location: int = DEFAULT_LOCATION,
    distance: int = DEFAULT_DISTANCE,
) -> tuple[bool, float]:
    """Approximate search of a single pattern chunk (<= 32 chars) in text.

    Returns:
        (is_match, score) with score in [0.001, 1]
    """
    alphabet = _pattern_alphabet(pattern)
    pattern_len = len(pattern)
    text_len = len(text)
    expected = max(0, min(location, text_len))

    current_threshold = threshold
    best_location = expected

    # Exact occurrences tighten the threshold before the fuzzy pass
    index = text.find(pattern, best_location)
    while index > -1:
        current_threshold = min(_score(pattern_len, 0, index, expected, distance), current_threshold)
        best_location = index + pattern_len
        index = text.find(pattern, best_location)

    best_location = -1
    last_bits: list[int] = []
    final_score = 1.0
    bin_max = pattern_len + text_len
    match_mask = 1 << (pattern_len - 1)

    for errors in range(pattern_len):
        # Binary search for how far from the expected location a match
        # with this many errors can still be under the threshold
        bin_min = 0
        bin_mid = bin_max
        while bin_min < bin_mid:
            if _score(pattern_len, errors, expected + bin_mid, expected, distance) <= current_threshold:
                bin_min = bin_mid
            else:
                bin_max = bin_mid
            bin_mid = (bin_max - bin_min) // 2 + bin_min
        bin_max = bin_mid

        start = max(1, expected - bin_mid + 1)
        finish = min(expected + bin_mid, text_len) + pattern_len

        bits = [0] * (finish + 2)
        bits[finish + 1] = (1 << errors) - 1

        j = finish
        while j >= start:
            current = j - 1
            char_match = alphabet.get(text[current], 0) if current < text_len else 0

            bits[j] = ((bits[j + 1] << 1) | 1) & char_match
            if errors:
                bits[j] |= ((_at(last_bits, j + 1) | _at(last_bits, j)) << 1) | 1 | _at(last_bits, j + 1)

            if bits[j] & match_mask:
                final_score = _score(pattern_len, errors, current, expected, distance)
                if final_score <= current_threshold:
                    current_threshold = final_score
                    best_location = current
                    if best_location <= expected:
                        break
                    start = max(1, 2 * expected - best_location)
            j -= 1

        if _score(pattern_len, errors + 1, expected, expected, distance) > current_threshold:
            break
        last_bits = bits

    return best_location >= 0, max(MIN_SCORE, final_score)


def fuzzy_score(
    text: str,
    pattern: str,
    threshold: float = DEFAULT_THRESHOLD,
    location: int = DEFAULT_LOCATION,
    distance: int = DEFAULT_DISTANCE,
) -> Optional[float]:
    """Case-insensitive approximate match score of pattern in text.

    Patterns longer than 32 characters are searched in 32-char chunks and the
    chunk scores averaged.

    Returns:
        Score (0 = exact, lower is better) or None if no match
    """
    text = text.lower()
    pattern = pattern.lower()
    if not pattern:
        return None
    if pattern == text:
        return 0.0

    chunks: list[tuple[str, int]] = []
    if len(pattern) <= MAX_PATTERN_LENGTH:
        chunks.append((pattern, 0))
    else:
        remainder = len(pattern) % MAX_PATTERN_LENGTH
        end = len(pattern) - remainder
        for i in range(0, end, MAX_PATTERN_LENGTH):
            chunks.append((pattern[i : i + MAX_PATTERN_LENGTH], i))
        if remainder:
            start_index = len(pattern) - MAX_PATTERN_LENGTH
            chunks.append((pattern[start_index:], start_index))

    total = 0.0
    has_match = False
    for chunk, start_index in chunks:
        is_match, score = bitap_search(text, chunk, threshold, location + start_index, distance)
        total += score
        has_match = has_match or is_match

    return total / len(chunks) if has_match else None


def field_norm(value: str) -> float:
    """1/sqrt(token count), rounded to 3 decimals."""
    tokens = len([t for t in value.split(" ") if t])
    n = 1 / math.sqrt(max(tokens, 1))
    return math.floor(n * 1000 + 0.5) / 1000


# =============================================================================
# Index
# =============================================================================


class FuzzyIndex:
    """Immutable weighted multi-key search index over reference entries."""

    def __init__(
        self,
        entries: Sequence[ReferenceEntry],
        keys: Sequence[SearchKey],
        threshold: float = DEFAULT_THRESHOLD,
        limit: int = DEFAULT_LIMIT,
        empty_query_mode: str = EMPTY_QUERY_ALL,
    ):
        if empty_query_mode not in (EMPTY_QUERY_ALL, EMPTY_QUERY_NONE):
            raise ValueError(f"Unknown empty query mode: {empty_query_mode}")

        total_weight = sum(k.weight for k in keys)
        self._entries = tuple(entries)
        self._keys = tuple(
            SearchKey(name=k.name, getter=k.getter, weight=k.weight / total_weight) for k in keys
        )
        self.threshold = threshold
        self.limit = limit
        self.empty_query_mode = empty_query_mode

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[ReferenceEntry, ...]:
        return self._entries

    def _values(self, entry: ReferenceEntry, key: SearchKey) -> list[str]:
        raw = key.getter(entry)
        values = [raw] if isinstance(raw, str) else list(raw or ())
        return [v for v in values if isinstance(v, str) and v.strip()]

    def score_entry(self, entry: ReferenceEntry, query: str) -> Optional[float]:
        """Combined score of an entry, or None when no key matches."""
        total = 1.0
        matched = False
        for key in self._keys:
            for value in self._values(entry, key):
                score = fuzzy_score(value, query, threshold=self.threshold)
                if score is None:
                    continue
                matched = True
                base = EPSILON if score == 0 else score
                total *= base ** (key.weight * field_norm(value))
        return total if matched else None

    def search(self, query: str) -> list[SearchHit]:
        """Ranked matches for query, best first, truncated to the limit."""
        query = (query or "").strip()
        if not query:
            if self.empty_query_mode == EMPTY_QUERY_NONE:
                return []
            return [SearchHit(entry=e, score=None) for e in self._entries]

        scored: list[tuple[float, int, ReferenceEntry]] = []
        for idx, entry in enumerate(self._entries):
            score = self.score_entry(entry, query)
            if score is not None:
                scored.append((score, idx, entry))

        scored.sort(key=lambda item: (item[0], item[1]))
        logger.debug(f"Fuzzy search '{query}': {len(scored)} matches")
        return [SearchHit(entry=e, score=s) for s, _, e in scored[: self.limit]]


CURRENCY_KEYS = (
    SearchKey("code", lambda e: e.key),
    SearchKey("name", lambda e: e.display_name),
    SearchKey("countries", lambda e: e.countries),
)

CRYPTO_KEYS = (
    SearchKey("symbol", lambda e: e.key, weight=0.7),
    SearchKey("name", lambda e: e.display_name, weight=0.3),
)


def build_currency_index(entries: Sequence[ReferenceEntry], **options) -> FuzzyIndex:
    return FuzzyIndex(entries, CURRENCY_KEYS, **options)


def build_crypto_index(entries: Sequence[ReferenceEntry], **options) -> FuzzyIndex:
    return FuzzyIndex(entries, CRYPTO_KEYS, **options)
