"""Identity normalization for supply item names.

Responsibilities of this stage:
- derive a deterministic comparison key from a free-text item name
- keep plural stripping as an ordered, data-driven rule table
- avoid any side effects

The plural rules are a heuristic. Irregular plurals and words that merely end
in a matched suffix are mis-stemmed ("gases" -> "gas", "gas" -> "ga"); this is
a known limitation, not something callers should work around.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Protocol

type NormalizedKey = str

_SEPARATORS = re.compile(r"[-_]")
_QUOTES = re.compile(r"[\"'‘’‚‛“”„‟]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class SuffixRule:
    """Replace ``suffix`` with ``replacement`` unless an excluded ending applies."""

    suffix: str
    replacement: str = ""
    excluded_endings: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not text.endswith(self.suffix):
            return False
        if any(text.endswith(ending) for ending in self.excluded_endings):
            return False
        # the final word must be longer than the suffix itself
        last_word = text.rsplit(" ", 1)[-1]
        return len(last_word) > len(self.suffix)

    def apply(self, text: str) -> str:
        return text[: len(text) - len(self.suffix)] + self.replacement


PLURAL_RULES: Final[tuple[SuffixRule, ...]] = (
    SuffixRule("oes", "o"),
    SuffixRule("oe", "o"),
    SuffixRule("ies", "y"),
    SuffixRule("ves", "f"),
    SuffixRule("es"),
    SuffixRule("s", excluded_endings=("ss", "us")),
)


class NormalizeName(Protocol):
    """Compute the comparison key of an item name."""

    def __call__(self, name: str) -> NormalizedKey: ...


def clean_text(name: str) -> str:
    """Lowercase, unify separators, drop quotes and collapse whitespace."""

    text = name.lower()
    text = _SEPARATORS.sub(" ", text)
    text = _QUOTES.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def strip_plural(text: str, rules: tuple[SuffixRule, ...] = PLURAL_RULES) -> str:
    """Apply the first matching rule of ``rules``, at most once."""

    for rule in rules:
        if rule.matches(text):
            return rule.apply(text)
    return text


def normalize(name: str | None, *, rules: tuple[SuffixRule, ...] = PLURAL_RULES) -> NormalizedKey:
    """Return the comparison key for ``name``; never fails, ``None`` -> ``""``."""

    if not name:
        return ""
    return strip_plural(clean_text(name), rules)


def same_display_name(left: str, right: str) -> bool:
    """Compare two display names ignoring case and surrounding whitespace."""

    return left.strip().casefold() == right.strip().casefold()
