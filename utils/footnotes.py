"""Footnote rendering: reference links plus footnote-number styling"""
import html
import re

from utils.catalog_linker import link_catalog_references
from utils.quran_linker import link_scripture_references
from utils.text_spans import protected_ranges

# (1), (٢), (۳) ...
_FOOTNOTE_NUMBER = re.compile(r"\((\d+)\)")


def style_footnote_numbers(text: str) -> str:
    """Wrap parenthesized numbers in a span, skipping anything inside an anchor."""
    anchors = protected_ranges(text)

    def replace(match: re.Match) -> str:
        if any(start <= match.start() < end for start, end in anchors):
            return match.group(0)
        return f'<span class="footnote-number">({match.group(1)})</span>'

    return _FOOTNOTE_NUMBER.sub(replace, text)


def render_footnote(text: str) -> str:
    """
    Escapes the raw text, then adds scripture links, catalog links and number styling.

    Linking runs before styling so "البقرة (2): 255" is still recognised.
    """
    if not text:
        return ""
    result = link_scripture_references(html.escape(text))
    result = link_catalog_references(result)
    return style_footnote_numbers(result)
