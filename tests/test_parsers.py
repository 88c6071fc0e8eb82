import unittest

from static_site_tools.parsers import TranslationEdit, apply_edits, edit_for, extract_fragments


class ExtractFragmentsTests(unittest.TestCase):
    def test_paragraph_and_anchor_text(self) -> None:
        print("Text inside watched tags is extracted with its raw span.")
        html = "<html><body><p>Hello</p><a href='#'>World</a></body></html>"

        fragments = extract_fragments(html)

        self.assertEqual([(f.tag, f.text) for f in fragments], [("p", "Hello"), ("a", "World")])
        self.assertEqual([f.index for f in fragments], [0, 1])
        for fragment in fragments:
            self.assertEqual(html[fragment.start:fragment.end], fragment.text)

    def test_no_watched_tags(self) -> None:
        print("Markup without watched tags yields nothing.")
        html = "<html><body><div>Just a div</div><span>and a span</span></body></html>"

        self.assertEqual(extract_fragments(html), [])

    def test_whitespace_around_text_is_kept_aside(self) -> None:
        print("Surrounding whitespace is recorded but not sent for translation.")
        html = "<div>\n  <p>\n    Hello   there\n  </p>\n</div>"

        [fragment] = extract_fragments(html)

        self.assertEqual(fragment.text, "Hello there")
        self.assertEqual(fragment.leading, "\n    ")
        self.assertEqual(fragment.trailing, "\n  ")
        self.assertEqual(html[fragment.start:fragment.end], "\n    Hello   there\n  ")

    def test_entities_are_unescaped(self) -> None:
        print("Character references are decoded in the fragment text.")
        html = "<p>Caf&eacute; &amp; bar</p>"

        [fragment] = extract_fragments(html)

        self.assertEqual(fragment.text, "Café & bar")
        self.assertEqual(html[fragment.start:fragment.end], "Caf&eacute; &amp; bar")

    def test_nested_elements_are_tagged_by_nearest_owner(self) -> None:
        print("Each text node belongs to its nearest watched element.")
        html = "<p>Click <a href='/x'>here</a> now</p>"

        fragments = extract_fragments(html)

        self.assertEqual(
            [(f.tag, f.text) for f in fragments],
            [("p", "Click"), ("a", "here"), ("p", "now")],
        )

    def test_script_and_style_are_ignored(self) -> None:
        print("Script and style contents are never visible copy.")
        html = "<p>Hi<script>var s = 'text';</script></p><style>p { color: red; }</style>"

        fragments = extract_fragments(html)

        self.assertEqual([f.text for f in fragments], ["Hi"])

    def test_void_elements_do_not_swallow_text(self) -> None:
        print("Line breaks split a paragraph into separate fragments.")
        html = "<p>Line one<br>Line two<br/>Line three</p>"

        fragments = extract_fragments(html)

        self.assertEqual([f.text for f in fragments], ["Line one", "Line two", "Line three"])
        self.assertTrue(all(f.tag == "p" for f in fragments))

    def test_headings_and_custom_tags(self) -> None:
        print("All six heading levels are watched; custom tag lists are honoured.")
        html = "<h1>One</h1><h6>Six</h6><h7>Seven</h7><li>Item</li>"

        self.assertEqual([f.text for f in extract_fragments(html)], ["One", "Six"])
        self.assertEqual([f.text for f in extract_fragments(html, ("li",))], ["Item"])

    def test_text_without_letters_is_skipped(self) -> None:
        html = "<p>2024</p><p>&nbsp;</p><p>Year 2024</p>"

        self.assertEqual([f.text for f in extract_fragments(html)], ["Year 2024"])


class ApplyEditsTests(unittest.TestCase):
    def test_edits_keep_surrounding_markup(self) -> None:
        print("Edits replace only the text span and keep whitespace.")
        html = '<div class="x">\n<p> Hello </p>\n<a href="/a">World</a></div>'
        hello, world = extract_fragments(html)

        result = apply_edits(html, [edit_for(world, "Wereld"), edit_for(hello, "Hallo")])

        self.assertEqual(result, '<div class="x">\n<p> Hallo </p>\n<a href="/a">Wereld</a></div>')

    def test_translated_text_is_escaped(self) -> None:
        print("Translated text is HTML-escaped to avoid injection.")
        html = "<p>Hello</p>"
        [fragment] = extract_fragments(html)

        result = apply_edits(html, [edit_for(fragment, "<b>Hi</b> & bye")])

        self.assertEqual(result, "<p>&lt;b&gt;Hi&lt;/b&gt; &amp; bye</p>")

    def test_overlapping_edits_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            apply_edits("abcdef", [TranslationEdit(0, 3, "x"), TranslationEdit(2, 4, "y")])

    def test_no_edits_returns_input(self) -> None:
        self.assertEqual(apply_edits("<p>Hello</p>", []), "<p>Hello</p>")


if __name__ == "__main__":
    unittest.main()
