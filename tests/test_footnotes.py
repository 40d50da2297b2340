import unittest

from utils.footnotes import render_footnote, style_footnote_numbers


class TestFootnotes(unittest.TestCase):

    def test_numbers_are_styled(self):
        self.assertEqual(
            style_footnote_numbers("(1) نص (٣)"),
            '<span class="footnote-number">(1)</span> نص <span class="footnote-number">(٣)</span>'
        )

    def test_both_link_kinds(self):
        result = render_footnote("(1) الكافي ج 8 ص 151 و(البقرة: 255)")
        self.assertTrue(result.startswith('<span class="footnote-number">(1)</span> '))
        self.assertIn('href="/book/01348/8/151"', result)
        self.assertIn('href="https://quran.com/2/255"', result)

    def test_chapter_number_inside_link_is_not_styled(self):
        result = render_footnote("البقرة (2): 255")
        self.assertIn('href="https://quran.com/2/255"', result)
        self.assertNotIn("footnote-number", result)

    def test_markup_in_text_is_escaped(self):
        result = render_footnote('<script>x</script> (البقرة: 255) & (2)')
        self.assertNotIn("<script>", result)
        self.assertTrue(result.startswith("&lt;script&gt;x&lt;/script&gt; <a "))
        self.assertIn('href="https://quran.com/2/255"', result)
        self.assertIn('&amp; <span class="footnote-number">(2)</span>', result)

    def test_plain_text(self):
        self.assertEqual(render_footnote("نص بلا مراجع"), "نص بلا مراجع")
        self.assertEqual(render_footnote(""), "")


if __name__ == "__main__":
    unittest.main()
