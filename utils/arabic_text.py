"""Arabic text normalization and query classification."""
import re
from typing import List

# Harakat, superscript alef and Quranic annotation marks
_DIACRITICS = re.compile(r"[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06DC\u06DF-\u06E4\u06E7\u06E8\u06EA-\u06ED]")

# أ إ آ ٱ and the rarer hamza-bearing alef shapes
_ALEF_VARIANTS = re.compile(r"[\u0622\u0623\u0625\u0671\u0672\u0673]")

# Ta marbuta at the end of a word
_FINAL_TA_MARBUTA = re.compile(r"\u0629(?=\u0640*(?!\w))")

_TATWEEL = "\u0640"

# Persian/Urdu kaf and yeh
_REGIONAL_LETTERS = str.maketrans({'ک': 'ك', 'ی': 'ي'})

_LATIN_QUERY = re.compile(r"^[A-Za-z\s\-']+$")

_ARABIC_LETTER = re.compile(r"[\u0600-\u06FF]")

_TOKEN_SPLIT = re.compile(r'\s+')


def normalize_arabic(text: str) -> str:
    """
    Canonicalize Arabic text so orthographic noise does not fragment matches.

    Steps run in a fixed order; later folds assume earlier ones already ran:
        1. remove diacritics
        2. alef variants -> bare alef
        3. word-final ta marbuta -> ha
        4. alef maksura -> ya
        5. drop tatweel
        6. Persian kaf/yeh -> Arabic kaf/ya

    Total and idempotent: normalize_arabic(normalize_arabic(x)) == normalize_arabic(x).
    """
    if not text:
        return ""

    text = _DIACRITICS.sub('', text)
    text = _ALEF_VARIANTS.sub('ا', text)
    text = _FINAL_TA_MARBUTA.sub('ه', text)
    text = text.replace('ى', 'ي')
    text = text.replace(_TATWEEL, '')
    text = text.translate(_REGIONAL_LETTERS)

    return text.strip()


def is_latin_text(text: str) -> bool:
    """True iff the query holds only ASCII letters, whitespace, hyphens and apostrophes."""
    stripped = (text or "").strip()
    return bool(stripped) and _LATIN_QUERY.match(stripped) is not None


def contains_arabic(text: str) -> bool:
    return _ARABIC_LETTER.search(text or "") is not None


def tokenize(text: str) -> List[str]:
    """Split on whitespace, dropping empty tokens."""
    return [token for token in _TOKEN_SPLIT.split(text or "") if token]
