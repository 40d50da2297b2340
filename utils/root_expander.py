"""
Arabic morphological expansion.

Root mode strips common clitics and inflection markers so that a search term
matches its family of inflected forms. This is affix stripping, not a real
morphological analyzer; it over-matches on purpose.
"""
from typing import Iterable, List

from utils.arabic_text import normalize_arabic

# Longest first so "وال" wins over "و"
PREFIXES = ('وال', 'بال', 'كال', 'فال', 'لل', 'ال', 'و', 'ف', 'ب', 'ك', 'ل')

# Normalized forms (ة already folded to ه)
SUFFIXES = (
    'ات', 'ون', 'ين', 'ان', 'وا', 'ها', 'هم', 'هن', 'كم', 'كن', 'نا', 'ني', 'ته', 'يه',
    'ه', 'ي', 'ك', 'ت',
)

# Plural verb ending: "كتبوا" <-> "كتب"
VERB_PLURAL_ENDING = 'وا'
_SHORT_WORD_LENGTH = 3

_MIN_STEM_MARGIN = 2


def _can_strip(token: str, affix: str) -> bool:
    """Remaining stem must exceed the affix length by at least two characters."""
    return len(token) - len(affix) >= len(affix) + _MIN_STEM_MARGIN


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def strip_prefixes(token: str) -> List[str]:
    return [token[len(p):] for p in PREFIXES if token.startswith(p) and _can_strip(token, p)]


def strip_suffixes(token: str) -> List[str]:
    return [token[:-len(s)] for s in SUFFIXES if token.endswith(s) and _can_strip(token, s)]


def expand_root(token: str) -> List[str]:
    """
    Morphological family of one normalized token; the original token comes first.

    Variants: each single prefix strip, each single suffix strip, and each
    prefix-then-suffix strip, all under the same length guard.
    """
    token = token.strip()
    if not token:
        return []

    variants = [token]
    prefix_stripped = strip_prefixes(token)
    variants.extend(prefix_stripped)
    variants.extend(strip_suffixes(token))
    for stem in prefix_stripped:
        variants.extend(strip_suffixes(stem))

    return _unique(variants)


def verb_ending_alternation(token: str) -> List[str]:
    """
    Alternate spelling for the plural verb ending.

    Tokens ending in "وا" gain a variant without it; three-letter tokens gain one
    with it appended. The token itself is not included.
    """
    if token.endswith(VERB_PLURAL_ENDING) and len(token) > len(VERB_PLURAL_ENDING) + 1:
        return [token[:-len(VERB_PLURAL_ENDING)]]
    if len(token) == _SHORT_WORD_LENGTH:
        return [token + VERB_PLURAL_ENDING]
    return []


def expand_direct_input(text: str, with_alternation: bool = True) -> List[List[str]]:
    """
    Token lists to search for Arabic typed directly by the user.

    The normalized input comes first; each alternation adds one more token list
    with a single token swapped. Root-mode callers pass with_alternation=False,
    since affix stripping already covers inflected forms.
    """
    tokens = normalize_arabic(text).split()
    if not tokens:
        return []

    variants = [tokens]
    if not with_alternation:
        return variants
    for index, token in enumerate(tokens):
        for alternate in verb_ending_alternation(token):
            variants.append(tokens[:index] + [alternate] + tokens[index + 1:])

    unique = []
    seen = set()
    for variant in variants:
        key = tuple(variant)
        if key not in seen:
            seen.add(key)
            unique.append(variant)
    return unique
