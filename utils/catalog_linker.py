"""
Links citations of other catalog works (e.g. "الكافي ج 8 ص 151") to their pages.

Only works listed in CATALOG_WORKS are recognised. For every work, names are tried
longest first and, per name, the citation shapes in PATTERN_ORDER; the first
non-overlapping match wins.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from config import settings
from core.domain import Reference, ReferenceSpan
from core.enums import ReferenceKind
from utils.text_spans import rewrite_spans, select_spans


@dataclass(frozen=True)
class CatalogWork:
    id: str
    names: Tuple[str, ...]
    default_volume: int = 1
    max_volume: Optional[int] = None


# Stable order; ids match the books table
CATALOG_WORKS: Tuple[CatalogWork, ...] = (
    CatalogWork('01432', ('بصائر الدرجات', 'البصائر')),
    CatalogWork('01533', ('كمال الدين', 'إكمال الدين', 'اكمال الدين', 'كمال الدین')),
    CatalogWork('01407', ('بحار الأنوار', 'بحار الانوار', 'البحار'), max_volume=110),
    # "كافي" alone is left out; it matches inside too many phrases
    CatalogWork('01348', ('الكافي', 'الکافي', 'اصول كافى', 'أصول الكافي', 'اصول الكافي'), max_volume=8),
    CatalogWork('01498', ('علل الشرائع', 'علل الشرایع', 'العلل')),
    CatalogWork('01462', ('الخصال',)),
    CatalogWork('01560', ('معاني الأخبار', 'معاني الاخبار', 'المعاني')),
    CatalogWork('01503', ('عيون أخبار الرضا', 'عيون اخبار الرضا', 'العيون')),
    CatalogWork('02560', ('أمالي الصدوق', 'امالي الصدوق', 'الأمالي للصدوق', 'الامالي للصدوق')),
    CatalogWork('01424', ('أمالي الطوسي', 'امالي الطوسي', 'الأمالي للطوسي', 'الأمالي (للطوسي)')),
    CatalogWork('01346', ('تهذيب الأحكام', 'تهذيب الاحكام', 'التهذيب'), max_volume=10),
    CatalogWork('01347', ('من لا يحضره الفقيه', 'من لايحضره الفقيه', 'الفقيه'), max_volume=4),
    CatalogWork('01413', ('الإرشاد', 'الارشاد')),
    CatalogWork('01506', ('الغيبة للطوسي', 'غيبة الطوسي', 'الغيبة للشيخ الطوسي')),
    CatalogWork('01507', ('الغيبة للنعماني', 'غيبة النعماني')),
    CatalogWork('01544', ('المحاسن',)),
    CatalogWork('00628', ('قرب الإسناد', 'قرب الاسناد')),
    CatalogWork('01446', ('تفسير القمي', 'تفسير القمّي')),
    CatalogWork('01453', ('ثواب الأعمال', 'ثواب الاعمال', 'عقاب الأعمال', 'عقاب الاعمال')),
    CatalogWork('01530', ('كشف الغمة', 'كشف الغمّة')),
    CatalogWork('01418', ('إعلام الورى', 'اعلام الورى')),
    CatalogWork('01566', ('المناقب', 'مناقب آل أبي طالب', 'مناقب ابن شهر آشوب')),
    CatalogWork('01465', ('الدعوات', 'دعوات الراوندي')),
    CatalogWork('01454', ('جامع الأخبار', 'جامع الاخبار')),
    CatalogWork('01410', ('الاختصاص', 'الإختصاص')),
    CatalogWork('01559', ('مصباح المتهجد', 'المصباح')),
    CatalogWork('01537', ('التمحيص',)),
    CatalogWork('00902', ('إثبات الهداة', 'اثبات الهداة')),
    CatalogWork('01417', ('أعلام الدين', 'اعلام الدين')),
    CatalogWork('14513', ('مكارم الأخلاق', 'مكارم الاخلاق')),
)

_RANGE_TAIL = r"(?:\s*(?:و|-)\s*(?P<end>\d+))?"

# (shape, regex template); {name} is the escaped work name.
# Volume/page order differs between shapes; the most specific shape comes first.
PATTERN_ORDER = (
    ('volume-page-markers', r"{name}\s+ج\s*(?P<volume>\d+)\s+ص\s*(?P<page>\d+)" + _RANGE_TAIL),
    ('colon-volume-slash-page', r"{name}\s*:\s*(?P<volume>\d+)/(?P<page>\d+)" + _RANGE_TAIL),
    ('colon-page', r"{name}\s*:\s*(?P<page>\d+)" + _RANGE_TAIL + r"(?![\d/])"),
    ('page-marker', r"{name}\s+ص\s*(?P<page>\d+)" + _RANGE_TAIL),
    ('page-slash-volume', r"{name}\s+(?P<page>\d+)/(?P<volume>\d+)(?!\d)"),
)


def _compile_patterns():
    compiled = []
    for work in CATALOG_WORKS:
        for name in sorted(work.names, key=len, reverse=True):
            escaped = re.escape(name)
            for _, template in PATTERN_ORDER:
                compiled.append((work, re.compile(template.format(name=escaped))))
    return tuple(compiled)


_COMPILED = _compile_patterns()


def book_url(work_id: str, volume: int, page: int, base: str = settings.SHARE_URL_BASE) -> str:
    return f"{base.rstrip('/')}/{work_id}/{volume}/{page}"


def _reference_from_match(work: CatalogWork, match: re.Match) -> Optional[Reference]:
    groups = match.groupdict()
    volume = int(groups["volume"]) if groups.get("volume") else work.default_volume
    page = int(groups["page"])
    end = int(groups["end"]) if groups.get("end") else None

    if volume < 1 or page < 1:
        return None
    if work.max_volume is not None and volume > work.max_volume:
        return None
    if end is not None and end < page:
        end = None

    return Reference(
        kind=ReferenceKind.CATALOG,
        unit_id=work.id,
        sub_unit=volume,
        unit=page,
        unit_end=end,
        display_text=match.group(0),
        target_url=book_url(work.id, volume, page),
    )


def find_catalog_spans(text: str) -> List[ReferenceSpan]:
    if not text:
        return []
    candidates = []
    for work, pattern in _COMPILED:
        for match in pattern.finditer(text):
            reference = _reference_from_match(work, match)
            if reference is not None:
                candidates.append(ReferenceSpan(start=match.start(), end=match.end(), reference=reference))
    return select_spans(text, candidates)


def detect_catalog_references(text: str) -> List[Reference]:
    return [span.reference for span in find_catalog_spans(text)]


def _anchor(span: ReferenceSpan, matched: str) -> str:
    return f'<a href="{span.reference.target_url}" class="book-ref-link">{matched}</a>'


def link_catalog_references(text: str) -> str:
    """Wrap each recognised citation in an anchor to the cited page; other text is untouched."""
    return rewrite_spans(text, find_catalog_spans(text), _anchor)
