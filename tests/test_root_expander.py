import unittest

from utils.root_expander import expand_direct_input, expand_root, verb_ending_alternation


class TestExpandRoot(unittest.TestCase):

    def test_original_token_first(self):
        self.assertEqual(expand_root("الكتاب")[0], "الكتاب")

    def test_strips_article(self):
        self.assertEqual(expand_root("الكتاب"), ["الكتاب", "كتاب"])

    def test_strips_suffix(self):
        self.assertEqual(expand_root("مكتبه"), ["مكتبه", "مكتب"])

    def test_prefix_then_suffix(self):
        self.assertEqual(expand_root("المسلمون"), ["المسلمون", "مسلمون", "المسلم", "مسلم"])

    def test_short_words_are_not_over_stripped(self):
        self.assertEqual(expand_root("كتب"), ["كتب"])
        self.assertEqual(expand_root("بيت"), ["بيت"])

    def test_length_guard_for_long_prefix(self):
        # "وال" would leave a four-letter stem, one short of the guard
        variants = expand_root("والكتاب")
        self.assertNotIn("كتاب", variants)
        self.assertIn("الكتاب", variants)

    def test_unique_and_non_empty(self):
        variants = expand_root("والمؤمنات")
        self.assertEqual(len(variants), len(set(variants)))
        self.assertTrue(all(variants))

    def test_blank(self):
        self.assertEqual(expand_root("  "), [])


class TestVerbEndingAlternation(unittest.TestCase):

    def test_drops_plural_ending(self):
        self.assertEqual(verb_ending_alternation("كتبوا"), ["كتب"])

    def test_adds_plural_ending_to_short_words(self):
        self.assertEqual(verb_ending_alternation("كتب"), ["كتبوا"])

    def test_other_words_unchanged(self):
        self.assertEqual(verb_ending_alternation("كتاب"), [])


class TestExpandDirectInput(unittest.TestCase):

    def test_normalized_input_first(self):
        variants = expand_direct_input("كَتَبُوا الحديث")
        self.assertEqual(variants[0], ["كتبوا", "الحديث"])
        self.assertIn(["كتب", "الحديث"], variants)

    def test_no_root_stripping_for_direct_input(self):
        variants = expand_direct_input("الكتاب")
        self.assertEqual(variants, [["الكتاب"]])

    def test_alternation_can_be_disabled(self):
        self.assertEqual(expand_direct_input("كتب", with_alternation=False), [["كتب"]])
        self.assertEqual(expand_direct_input("كتب"), [["كتب"], ["كتبوا"]])

    def test_blank(self):
        self.assertEqual(expand_direct_input("   "), [])
        self.assertEqual(expand_direct_input("   ", with_alternation=False), [])


if __name__ == "__main__":
    unittest.main()
