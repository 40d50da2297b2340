import unittest

from utils.catalog_linker import CATALOG_WORKS, detect_catalog_references, link_catalog_references


class TestLinkCatalogReferences(unittest.TestCase):

    def test_volume_and_page_markers(self):
        result = link_catalog_references("الكافي ج 8 ص 151")
        self.assertEqual(result, '<a href="/book/01348/8/151" class="book-ref-link">الكافي ج 8 ص 151</a>')

    def test_volume_beyond_declared_maximum_not_linked(self):
        text = "الكافي ج 9 ص 151"
        self.assertEqual(link_catalog_references(text), text)

    def test_colon_page_uses_default_volume(self):
        self.assertIn('href="/book/01432/1/61"', link_catalog_references("بصائر الدرجات: 61"))

    def test_colon_volume_slash_page(self):
        self.assertIn('href="/book/01432/11/436"', link_catalog_references("بصائر الدرجات: 11/436"))

    def test_page_marker_with_range(self):
        result = link_catalog_references("بصائر الدرجات ص 127-130")
        self.assertIn('href="/book/01432/1/127"', result)
        self.assertIn("127-130</a>", result)

    def test_page_slash_volume(self):
        self.assertIn('href="/book/01407/70/310"', link_catalog_references("بحار الانوار 310/70"))
        self.assertIn('href="/book/01348/2/131"', link_catalog_references("اصول كافى 131/2"))

    def test_longest_name_wins(self):
        result = link_catalog_references("أصول الكافي ج 2 ص 5")
        self.assertTrue(result.startswith('<a href="/book/01348/2/5" class="book-ref-link">أصول الكافي'))

    def test_names_with_regex_metacharacters(self):
        self.assertIn('href="/book/01424/1/5"', link_catalog_references("الأمالي (للطوسي) ص 5"))

    def test_shadda_spelling(self):
        self.assertIn('href="/book/01530/3/179"', link_catalog_references("كشف الغمّة ج 3 ص 179"))

    def test_arabic_indic_digits(self):
        self.assertIn('href="/book/01348/8/151"', link_catalog_references("الكافي ج ٨ ص ١٥١"))

    def test_unknown_work_unchanged(self):
        text = "كتاب مجهول ج 1 ص 2"
        self.assertEqual(link_catalog_references(text), text)

    def test_surrounding_text_untouched(self):
        text = "انظر: الخصال ص 12، وغيره."
        result = link_catalog_references(text)
        self.assertTrue(result.startswith("انظر: <a "))
        self.assertTrue(result.endswith("</a>، وغيره."))

    def test_safe_to_run_twice(self):
        once = link_catalog_references("الكافي ج 1 ص 2 والبحار ج 3 ص 4")
        self.assertEqual(link_catalog_references(once), once)
        self.assertEqual(once.count("<a "), 2)


class TestDetectCatalogReferences(unittest.TestCase):

    def test_reference_fields(self):
        refs = detect_catalog_references("تهذيب الأحكام ج 3 ص 10-12")
        self.assertEqual(len(refs), 1)
        ref = refs[0]
        self.assertEqual((ref.unit_id, ref.sub_unit, ref.unit, ref.unit_end), ("01346", 3, 10, 12))
        self.assertEqual(ref.target_url, "/book/01346/3/10")

    def test_table_ids_are_unique(self):
        ids = [work.id for work in CATALOG_WORKS]
        self.assertEqual(len(ids), len(set(ids)))


if __name__ == "__main__":
    unittest.main()
