import unittest

from utils.arabic_text import contains_arabic, is_latin_text, normalize_arabic, tokenize


class TestNormalizeArabic(unittest.TestCase):

    def test_strips_diacritics(self):
        # مُحَمَّد
        self.assertEqual(normalize_arabic("مُحَمَّد"), "محمد")

    def test_folds_alef_variants(self):
        self.assertEqual(normalize_arabic("أحمد"), "احمد")
        self.assertEqual(normalize_arabic("إبراهيم"), "ابراهيم")
        self.assertEqual(normalize_arabic("آمن"), "امن")

    def test_folds_final_ta_marbuta_only(self):
        self.assertEqual(normalize_arabic("مكتبة"), "مكتبه")
        self.assertEqual(normalize_arabic("فاطمة الزهراء"), "فاطمه الزهراء")

    def test_folds_alef_maksura(self):
        self.assertEqual(normalize_arabic("موسى"), "موسي")

    def test_drops_tatweel(self):
        self.assertEqual(normalize_arabic("محـــمد"), "محمد")

    def test_folds_regional_letters(self):
        self.assertEqual(normalize_arabic("کتاب"), "كتاب")
        self.assertEqual(normalize_arabic("علی"), "علي")

    def test_total_on_empty_and_non_arabic(self):
        self.assertEqual(normalize_arabic(""), "")
        self.assertEqual(normalize_arabic(None), "")
        self.assertEqual(normalize_arabic("hello"), "hello")

    def test_idempotent(self):
        samples = [
            "بِسْمِ اللَّهِ الرَّحْمَنِ الرَّحِيمِ",
            "رحمةـ",
            "إِلَى الْمَدِينَةِ",
            "مکتبۀ علی",
            "الـــقرآن الكريم",
            "ٱلْحَمْدُ",
            "",
        ]
        for sample in samples:
            once = normalize_arabic(sample)
            self.assertEqual(normalize_arabic(once), once, msg=sample)


class TestQueryClassification(unittest.TestCase):

    def test_latin_queries(self):
        self.assertTrue(is_latin_text("muhammad"))
        self.assertTrue(is_latin_text("al-hadith"))
        self.assertTrue(is_latin_text("qur'an sharif"))

    def test_non_latin_queries(self):
        self.assertFalse(is_latin_text("محمد"))
        self.assertFalse(is_latin_text("hadith 12"))
        self.assertFalse(is_latin_text("   "))
        self.assertFalse(is_latin_text(""))

    def test_contains_arabic(self):
        self.assertTrue(contains_arabic("abc محمد"))
        self.assertFalse(contains_arabic("abc"))

    def test_tokenize_drops_empty(self):
        self.assertEqual(tokenize("  بسم   الله "), ["بسم", "الله"])
        self.assertEqual(tokenize(""), [])


if __name__ == "__main__":
    unittest.main()
