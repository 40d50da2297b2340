"""
Detection and linking of Quran verse citations in free text.

Recognised forms, tried in this order (earlier forms win overlaps):
    1. البقرة (2): 255          name, parenthesized chapter number, verse
    2. سورة البقرة آية 255-257   optional "سورة", name, verse keyword, verse or range
    3. النساء، الآية: 32         name, comma, verse keyword, colon, verse
    4. نساء 24/4                 name, verse / chapter number
    5. (البقرة: 255)             parenthesized name and verse

Forms 1 and 4 are rejected unless the written chapter number matches the name.
Every verse is checked against the chapter's verse count; failures stay plain text.
"""
import re
from typing import List, Optional

from config import settings
from core.domain import Reference, ReferenceSpan
from core.enums import ReferenceKind
from utils.quran_tables import CHAPTER_BY_NAME, chapter_name, chapter_number, is_valid_verse
from utils.text_spans import rewrite_spans, select_spans

_NAMES = "|".join(re.escape(name) for name in sorted(CHAPTER_BY_NAME, key=len, reverse=True))
_NAME = rf"(?<!\w)(?P<name>{_NAMES})(?!\w)"
_VERSE_KEYWORD = r"(?:ال)?[آا]ي[ةه]"
_RANGE = r"(?P<verse>\d+)(?:\s*-\s*(?P<end>\d+))?"

PATTERNS = (
    re.compile(rf"{_NAME}\s*\(\s*(?P<chapter>\d+)\s*\)\s*:\s*{_RANGE}(?!\d)"),
    re.compile(rf"(?:سور[ةه]\s+)?{_NAME}\s+{_VERSE_KEYWORD}\s*{_RANGE}(?!\d)"),
    re.compile(rf"{_NAME}\s*[،,]\s*{_VERSE_KEYWORD}\s*:\s*{_RANGE}(?!\d)"),
    re.compile(rf"{_NAME}\s+(?P<verse>\d+)\s*/\s*(?P<chapter>\d+)(?!\d)"),
    re.compile(r"\((?P<name>[^:()]+):\s*" + _RANGE + r"\s*\)"),
)

# Only used by detection; too ambiguous to rewrite
NUMERIC_PATTERN = re.compile(r"(?<!\d)(?P<chapter>\d{1,3}):(?P<verse>\d{1,3})(?:-(?P<end>\d{1,3}))?(?!\d)")


def verse_url(chapter: int, verse: int, verse_end: Optional[int] = None,
              base_url: str = settings.SCRIPTURE_VIEWER_BASE_URL) -> str:
    """Viewer URL for a verse, or for a range when verse_end differs from verse."""
    base = base_url.rstrip("/")
    if verse_end and verse_end != verse:
        return f"{base}/{chapter}/{verse}-{verse_end}"
    return f"{base}/{chapter}/{verse}"


def _make_reference(chapter: int, verse: int, verse_end: Optional[int], display: str) -> Optional[Reference]:
    if verse_end == verse:
        verse_end = None
    if not is_valid_verse(chapter, verse, verse_end):
        return None
    return Reference(
        kind=ReferenceKind.SCRIPTURE,
        unit_id=str(chapter),
        unit=verse,
        unit_end=verse_end,
        display_text=display,
        target_url=verse_url(chapter, verse, verse_end),
    )


def _reference_from_match(match: re.Match) -> Optional[Reference]:
    groups = match.groupdict()
    chapter = chapter_number(groups["name"])
    if not chapter:
        return None
    written = groups.get("chapter")
    if written is not None and int(written) != chapter:
        return None
    end = groups.get("end")
    return _make_reference(chapter, int(groups["verse"]), int(end) if end else None, match.group(0))


def find_scripture_spans(text: str) -> List[ReferenceSpan]:
    """Valid, non-overlapping citations in position order."""
    if not text:
        return []
    candidates = []
    for pattern in PATTERNS:
        for match in pattern.finditer(text):
            reference = _reference_from_match(match)
            if reference is not None:
                candidates.append(ReferenceSpan(start=match.start(), end=match.end(), reference=reference))
    return select_spans(text, candidates)


def detect_scripture_references(text: str, include_numeric: bool = False) -> List[Reference]:
    """
    De-duplicated references in order of appearance.

    With include_numeric, bare "2:255" style citations are reported as well; they
    are never linked by link_scripture_references.
    """
    references = [span.reference for span in find_scripture_spans(text)]
    if include_numeric and text:
        for match in NUMERIC_PATTERN.finditer(text):
            chapter = int(match.group("chapter"))
            end = match.group("end")
            verse = int(match.group("verse"))
            display = f"{chapter_name(chapter)}: {match.group(0).split(':', 1)[1]}"
            reference = _make_reference(chapter, verse, int(end) if end else None, display)
            if reference is not None:
                references.append(reference)

    unique = []
    seen = set()
    for reference in references:
        key = (reference.unit_id, reference.unit, reference.unit_end)
        if key not in seen:
            seen.add(key)
            unique.append(reference)
    return unique


def _anchor(span: ReferenceSpan, matched: str) -> str:
    return (
        f'<a href="{span.reference.target_url}" target="_blank" '
        f'rel="noopener noreferrer" class="quran-link">{matched}</a>'
    )


def link_scripture_references(text: str) -> str:
    """Wrap each valid citation in an anchor to the verse viewer; other text is untouched."""
    return rewrite_spans(text, find_scripture_spans(text), _anchor)
