"""Non-overlapping span selection and rewriting shared by the reference linkers"""
import re
from typing import Callable, Iterable, List, Tuple

from core.domain import ReferenceSpan

# Existing anchors are never re-linked or linked into
_ANCHOR = re.compile(r"<a\b[^>]*>.*?</a>", re.DOTALL)


def protected_ranges(text: str) -> List[Tuple[int, int]]:
    return [(m.start(), m.end()) for m in _ANCHOR.finditer(text)]


def _overlaps(start: int, end: int, taken: Iterable[Tuple[int, int]]) -> bool:
    return any(start < t_end and t_start < end for t_start, t_end in taken)


def select_spans(text: str, candidates: Iterable[ReferenceSpan]) -> List[ReferenceSpan]:
    """
    Accept candidates in the order given, dropping any that overlap an accepted
    span or an existing anchor. Returned spans are sorted by position.
    """
    taken = protected_ranges(text)
    accepted: List[ReferenceSpan] = []
    for span in candidates:
        if span.start >= span.end or _overlaps(span.start, span.end, taken):
            continue
        taken.append((span.start, span.end))
        accepted.append(span)
    return sorted(accepted, key=lambda s: s.start)


def rewrite_spans(text: str, spans: List[ReferenceSpan], render: Callable[[ReferenceSpan, str], str]) -> str:
    """Replace each span with render(span, matched_text); everything else is copied as-is."""
    if not spans:
        return text
    parts = []
    cursor = 0
    for span in spans:
        parts.append(text[cursor:span.start])
        parts.append(render(span, text[span.start:span.end]))
        cursor = span.end
    parts.append(text[cursor:])
    return "".join(parts)
