"""Chapter names and verse counts of the Quran"""
from types import MappingProxyType
from typing import Dict, Mapping

# Canonical chapter names in order; index + 1 is the chapter number
CHAPTER_NAMES = (
    'الفاتحة', 'البقرة', 'آل عمران', 'النساء', 'المائدة', 'الأنعام', 'الأعراف', 'الأنفال',
    'التوبة', 'يونس', 'هود', 'يوسف', 'الرعد', 'إبراهيم', 'الحجر', 'النحل', 'الإسراء',
    'الكهف', 'مريم', 'طه', 'الأنبياء', 'الحج', 'المؤمنون', 'النور', 'الفرقان', 'الشعراء',
    'النمل', 'القصص', 'العنكبوت', 'الروم', 'لقمان', 'السجدة', 'الأحزاب', 'سبأ', 'فاطر',
    'يس', 'الصافات', 'ص', 'الزمر', 'غافر', 'فصلت', 'الشورى', 'الزخرف', 'الدخان',
    'الجاثية', 'الأحقاف', 'محمد', 'الفتح', 'الحجرات', 'ق', 'الذاريات', 'الطور', 'النجم',
    'القمر', 'الرحمن', 'الواقعة', 'الحديد', 'المجادلة', 'الحشر', 'الممتحنة', 'الصف',
    'الجمعة', 'المنافقون', 'التغابن', 'الطلاق', 'التحريم', 'الملك', 'القلم', 'الحاقة',
    'المعارج', 'نوح', 'الجن', 'المزمل', 'المدثر', 'القيامة', 'الإنسان', 'المرسلات',
    'النبأ', 'النازعات', 'عبس', 'التكوير', 'الانفطار', 'المطففين', 'الانشقاق', 'البروج',
    'الطارق', 'الأعلى', 'الغاشية', 'الفجر', 'البلد', 'الشمس', 'الليل', 'الضحى', 'الشرح',
    'التين', 'العلق', 'القدر', 'البينة', 'الزلزلة', 'العاديات', 'القارعة', 'التكاثر',
    'العصر', 'الهمزة', 'الفيل', 'قريش', 'الماعون', 'الكوثر', 'الكافرون', 'النصر',
    'المسد', 'الإخلاص', 'الفلق', 'الناس',
)

_VERSE_COUNTS = (
    7, 286, 200, 176, 120, 165, 206, 75, 129, 109,
    123, 111, 43, 52, 99, 128, 111, 110, 98, 135,
    112, 78, 118, 64, 77, 227, 93, 88, 69, 60,
    34, 30, 73, 54, 45, 83, 182, 88, 75, 85,
    54, 53, 89, 59, 37, 35, 38, 29, 18, 45,
    60, 49, 62, 55, 78, 96, 29, 22, 24, 13,
    14, 11, 11, 18, 12, 12, 30, 52, 52, 44,
    28, 28, 20, 56, 40, 31, 50, 40, 46, 42,
    29, 19, 36, 25, 22, 17, 19, 26, 30, 20,
    15, 21, 11, 8, 8, 19, 5, 8, 8, 11,
    11, 8, 3, 9, 5, 4, 7, 3, 6, 3,
    5, 4, 5, 6,
)

CHAPTER_COUNT = 114

MAX_VERSES: Mapping[int, int] = MappingProxyType(
    {number: count for number, count in enumerate(_VERSE_COUNTS, start=1)}
)

_HAMZA_ALEFS = str.maketrans({'أ': 'ا', 'إ': 'ا', 'آ': 'ا'})
_ARTICLE = 'ال'


def _spellings(name: str):
    """Canonical name, its plain-alef and open-ha forms, each with and without the article."""
    forms = {name, name.translate(_HAMZA_ALEFS)}
    forms |= {form[:-1] + 'ه' for form in forms if form.endswith('ة')}
    forms |= {form.replace('ى', 'ي') for form in forms}
    for form in list(forms):
        # "آل عمران" keeps its first word; only a bare article is dropped
        if form.startswith(_ARTICLE) and len(form) > 3 and form[2] != ' ':
            forms.add(form[len(_ARTICLE):])
    return forms


def _build_name_table() -> Mapping[str, int]:
    table: Dict[str, int] = {}
    for number, name in enumerate(CHAPTER_NAMES, start=1):
        for spelling in _spellings(name):
            table.setdefault(spelling, number)
    return MappingProxyType(table)


# Every accepted spelling -> chapter number
CHAPTER_BY_NAME: Mapping[str, int] = _build_name_table()


def chapter_number(name: str) -> int:
    """Chapter number for a spelling, or 0 when unknown."""
    return CHAPTER_BY_NAME.get(name.strip(), 0)


def chapter_name(number: int) -> str:
    if 1 <= number <= CHAPTER_COUNT:
        return CHAPTER_NAMES[number - 1]
    return ""


def is_valid_verse(chapter: int, verse: int, verse_end: int = None) -> bool:
    """Chapter exists, verse within its count, and a range (if any) is ordered and in bounds."""
    max_verse = MAX_VERSES.get(chapter)
    if max_verse is None or verse < 1 or verse > max_verse:
        return False
    if verse_end is not None and (verse_end < verse or verse_end > max_verse):
        return False
    return True
