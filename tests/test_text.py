import unittest
from companysearch.catalog.base import MalformedFullTextQuery
from companysearch.catalog.text import (
    lexemes, parse_plain_query, plain_query_matches, similarity, trigrams
)


class TestTrigrams(unittest.TestCase):
    def test_padding_and_case(self):
        self.assertEqual(trigrams("Co"), frozenset({"  c", " co", "co "}))
        self.assertEqual(trigrams("ACME"), trigrams("acme"))

    def test_punctuation_splits_words(self):
        self.assertEqual(trigrams("AT&T"), trigrams("at t"))
        self.assertEqual(trigrams("..."), frozenset())

    def test_similarity_properties(self):
        self.assertEqual(similarity("Acme Corp", "Acme Corp"), 1.0)
        self.assertEqual(similarity("!!", "!!"), 1.0)
        self.assertEqual(similarity("!!", "??"), 0.0)
        a, b = "acme", "Acme Industries"
        self.assertAlmostEqual(similarity(a, b), similarity(b, a))
        for x, y in (("acme", "Ace Co"), ("microsfot", "Microsoft"), ("", "Acme")):
            s = similarity(x, y)
            self.assertGreaterEqual(s, 0.0)
            self.assertLessEqual(s, 1.0)

    def test_similarity_values(self):
        self.assertAlmostEqual(similarity("acme", "Ace Co"), 0.2)
        self.assertAlmostEqual(similarity("acme", "Acme Corp"), 0.5)
        self.assertGreater(similarity("microsfot", "Microsoft"), 0.3)

    def test_similarity_drops_as_overlap_shrinks(self):
        self.assertGreater(similarity("acme", "acme corp"), similarity("acme", "acne corp"))


class TestLexemes(unittest.TestCase):
    def test_stemming_and_stop_words(self):
        self.assertEqual(lexemes("The Shipping Holdings"), frozenset({"ship", "hold"}))
        self.assertEqual(lexemes("industry"), lexemes("Industries"))
        self.assertEqual(lexemes("of the and"), frozenset())

    def test_plain_query_is_and_of_terms(self):
        name = lexemes("Global Shipping Holdings International Group Limited")
        self.assertTrue(plain_query_matches(lexemes("ship holding"), name))
        self.assertFalse(plain_query_matches(lexemes("ship airline"), name))
        self.assertFalse(plain_query_matches(lexemes("the"), name))

    def test_nul_is_rejected(self):
        with self.assertRaises(MalformedFullTextQuery):
            parse_plain_query("acme\x00")


if __name__ == "__main__":
    unittest.main()
