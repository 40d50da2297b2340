"""
Latin-to-Arabic transliteration for search queries.

Converts romanized Arabic ("al-hadith", "muhammad") into a small, bounded set of
plausible Arabic spellings. Curated dictionary hits are used as-is; other words are
expanded letter by letter with a capped backtracking search.
"""
from itertools import islice
from types import MappingProxyType
from typing import List, Mapping, Sequence, Tuple

from core.domain import QueryVariant
from utils.arabic_text import normalize_arabic, tokenize

MAX_WORD_CANDIDATES = 8       # results kept per word
MAX_EXPLORED_BRANCHES = 400   # nodes visited per word before the search stops
MAX_OPTIONS_PER_LETTER = 2    # single-letter alternatives tried at each position
MAX_FIRST_WORD_OPTIONS = 4
MAX_TAIL_COMBINATIONS = 5
MAX_VARIANTS = 20

# Ground-truth spellings for high-frequency names, theological vocabulary and particles
COMMON_WORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'allah': ('الله',),
    'muhammad': ('محمد', 'محمّد'),
    'mohammed': ('محمد',),
    'ahmad': ('أحمد', 'احمد'),
    'hadith': ('حديث', 'الحديث'),
    'imam': ('إمام', 'امام', 'الإمام'),
    'quran': ('قرآن', 'القرآن'),
    'koran': ('قرآن', 'القرآن'),
    'prophet': ('نبي', 'النبي', 'رسول'),
    'nabi': ('نبي', 'النبي'),
    'rasool': ('رسول', 'الرسول'),
    'rasul': ('رسول', 'الرسول'),
    'salam': ('سلام', 'السلام'),
    'salat': ('صلاة', 'الصلاة'),
    'salah': ('صلاة', 'الصلاة'),
    'zakat': ('زكاة', 'الزكاة'),
    'hajj': ('حج', 'الحج'),
    'sawm': ('صوم', 'الصوم'),
    'fasting': ('صوم', 'الصوم', 'صيام'),
    'prayer': ('صلاة', 'الصلاة', 'دعاء'),
    'dua': ('دعاء', 'الدعاء'),
    'book': ('كتاب', 'الكتاب'),
    'kitab': ('كتاب', 'الكتاب'),
    'chapter': ('باب', 'فصل'),
    'bab': ('باب',),
    'narrated': ('روى', 'حدثنا', 'أخبرنا'),
    'said': ('قال', 'قالت'),
    'qala': ('قال',),
    'from': ('عن', 'من'),
    'an': ('عن',),
    'ali': ('علي', 'عليّ'),
    'hussain': ('حسين', 'الحسين'),
    'husayn': ('حسين', 'الحسين'),
    'hassan': ('حسن', 'الحسن'),
    'hasan': ('حسن', 'الحسن'),
    'fatima': ('فاطمة',),
    'khadija': ('خديجة',),
    'aisha': ('عائشة',),
    'jafar': ('جعفر',),
    'sadiq': ('الصادق', 'صادق'),
    'baqir': ('الباقر', 'باقر'),
    'rida': ('الرضا',),
    'mahdi': ('المهدي', 'مهدي'),
    'abu': ('أبو', 'ابو'),
    'abi': ('أبي', 'ابي'),
    'ibn': ('ابن', 'بن'),
    'bin': ('بن', 'ابن'),
    'bint': ('بنت',),
    'sharif': ('شريف',),
    'hikam': ('حکم', 'حكم', 'الحكم'),
    'gharar': ('غرر',),
    'iman': ('إيمان', 'الإيمان'),
    'islam': ('إسلام', 'الإسلام'),
    'tawhid': ('توحيد', 'التوحيد'),
    'jannah': ('جنة', 'الجنة'),
    'nar': ('نار', 'النار'),
    'ilm': ('علم', 'العلم'),
    'aql': ('عقل', 'العقل'),
    'wudu': ('وضوء', 'الوضوء'),
    'taqwa': ('تقوى', 'التقوى'),
    'sabr': ('صبر', 'الصبر'),
})

# Two-letter keys are digraphs and are tried before single letters at the same position
LETTER_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'a': ('ا', 'ع', 'أ', 'إ', 'آ', 'ى'),
    'b': ('ب',),
    'c': ('ك', 'ق'),
    'd': ('د', 'ض'),
    'e': ('ي', 'ى', 'ا', 'ع'),
    'f': ('ف',),
    'g': ('ج', 'غ'),
    'h': ('ه', 'ح', 'ة'),
    'i': ('ي', 'إ', 'ا'),
    'j': ('ج',),
    'k': ('ك', 'ک'),
    'l': ('ل',),
    'm': ('م',),
    'n': ('ن',),
    'o': ('و', 'ا'),
    'p': ('ب',),
    'q': ('ق',),
    'r': ('ر',),
    's': ('س', 'ص'),
    't': ('ت', 'ط'),
    'u': ('و', 'ا', 'ؤ'),
    'v': ('ف',),
    'w': ('و', 'ؤ'),
    'x': ('كس',),
    'y': ('ي', 'ى', 'ئ'),
    'z': ('ز', 'ظ'),
    "'": ('ع', 'ء'),
    'th': ('ث', 'ذ'),
    'kh': ('خ',),
    'dh': ('ذ', 'ظ'),
    'sh': ('ش',),
    'gh': ('غ',),
    'ch': ('ش',),
    'aa': ('ا', 'آ'),
    'ee': ('ي', 'ى'),
    'ii': ('ي',),
    'oo': ('و',),
    'uu': ('و',),
    'ou': ('و',),
})

# Romanized definite article, longest first
PREFIXES: Tuple[Tuple[str, str], ...] = (
    ('wal-', 'وال'),
    ('bil-', 'بال'),
    ('al-', 'ال'),
    ('el-', 'ال'),
    ('ul-', 'ال'),
    ('al', 'ال'),
    ('el', 'ال'),
)

_ARTICLE = 'ال'
_MIN_BARE_PREFIX_STEM = 3  # "al" without hyphen only when the stem is at least this long


def _split_prefix(word: str) -> Tuple[str, str]:
    """Return (arabic_prefix, latin_stem); prefix is '' when none applies."""
    for roman, arabic in PREFIXES:
        if not word.startswith(roman):
            continue
        stem = word[len(roman):]
        if not roman.endswith('-') and len(stem) < _MIN_BARE_PREFIX_STEM:
            continue
        if stem:
            return arabic, stem
    return '', word


def transliterate_letters(word: str) -> List[str]:
    """
    Backtracking letter-by-letter transliteration of one Latin stem.

    Digraphs are tried before single letters at each position. Both the number of
    explored branches and the number of results are capped.
    """
    if not word:
        return []

    results: List[str] = []
    explored = 0

    def build(current: str, pos: int) -> None:
        nonlocal explored
        if len(results) >= MAX_WORD_CANDIDATES or explored >= MAX_EXPLORED_BRANCHES:
            return
        explored += 1

        if pos >= len(word):
            if current and current not in results:
                results.append(current)
            return

        digraph = word[pos:pos + 2]
        if len(digraph) == 2 and digraph in LETTER_MAP:
            for arabic in LETTER_MAP[digraph]:
                build(current + arabic, pos + 2)

        letter = word[pos]
        options = LETTER_MAP.get(letter)
        if options:
            for arabic in options[:MAX_OPTIONS_PER_LETTER]:
                build(current + arabic, pos + 1)
        else:
            # Skip characters with no mapping (e.g. stray hyphens)
            build(current, pos + 1)

    build('', 0)
    return results


def convert_word(word: str) -> List[str]:
    """Arabic candidates for one Latin word; dictionary spellings come first."""
    lower = word.lower().strip("-'")
    if not lower:
        return []

    if lower in COMMON_WORDS:
        return list(COMMON_WORDS[lower])

    prefix, stem = _split_prefix(lower)
    stem = stem.strip("-")

    if stem in COMMON_WORDS:
        candidates = [
            spelling if spelling.startswith(_ARTICLE) or not prefix else prefix + spelling
            for spelling in COMMON_WORDS[stem]
        ]
    else:
        candidates = [prefix + option for option in transliterate_letters(stem)]

    unique: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in unique:
            unique.append(candidate)
    return unique[:MAX_WORD_CANDIDATES]


def generate_combinations(word_options: Sequence[Sequence[str]]) -> List[List[str]]:
    """
    Bounded cross product of per-word candidates.

    The first word contributes at most MAX_FIRST_WORD_OPTIONS choices and is paired with
    at most MAX_TAIL_COMBINATIONS combinations of the remaining words.
    """
    if not word_options:
        return []
    if len(word_options) == 1:
        return [[option] for option in islice(word_options[0], MAX_VARIANTS)]

    first, rest = word_options[0], word_options[1:]
    tails = generate_combinations(rest)[:MAX_TAIL_COMBINATIONS]

    combinations: List[List[str]] = []
    for option in first[:MAX_FIRST_WORD_OPTIONS]:
        for tail in tails:
            combinations.append([option] + tail)
    return combinations[:MAX_VARIANTS]


def transliterate(latin_text: str) -> List[QueryVariant]:
    """
    Convert Latin-script input into at most MAX_VARIANTS normalized Arabic variants.

    Words with no usable candidates are dropped rather than emptying the whole result.
    """
    word_options = [options for options in (convert_word(w) for w in tokenize(latin_text)) if options]

    variants: List[QueryVariant] = []
    seen = set()
    for combination in generate_combinations(word_options):
        tokens = tuple(
            token for token in (normalize_arabic(part) for part in combination) if token
        )
        if tokens and tokens not in seen:
            seen.add(tokens)
            variants.append(QueryVariant(tokens=tokens))
    return variants[:MAX_VARIANTS]
