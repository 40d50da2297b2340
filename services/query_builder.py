"""Turns query tokens into FTS5 MATCH expressions, one shape per search mode"""
from typing import List, Sequence

from core.enums import SearchMode
from utils.root_expander import expand_root


def quote_term(term: str) -> str:
    """FTS5 string literal; embedded double quotes are doubled."""
    return '"' + term.replace('"', '""') + '"'


def _clean(tokens: Sequence[str]) -> List[str]:
    return [t.strip() for t in tokens if t and t.strip()]


def build_exact(tokens: Sequence[str]) -> str:
    return quote_term(" ".join(_clean(tokens)))


def build_word(tokens: Sequence[str]) -> str:
    return " OR ".join(quote_term(t) for t in _clean(tokens))


def build_root(tokens: Sequence[str]) -> str:
    terms: List[str] = []
    for token in _clean(tokens):
        for member in expand_root(token):
            if member not in terms:
                terms.append(member)
    return " OR ".join(quote_term(t) + "*" for t in terms)


_BUILDERS = {
    SearchMode.EXACT: build_exact,
    SearchMode.WORD: build_word,
    SearchMode.ROOT: build_root,
}


def build_query(tokens: Sequence[str], mode: SearchMode) -> str:
    """
    Engine query string for already-normalized tokens.

    Callers must reject blank input first; empty token lists raise ValueError.
    """
    if not _clean(tokens):
        raise ValueError("Cannot build a query from empty tokens")
    return _BUILDERS[SearchMode(mode)](tokens)
