import math
import unittest

from repo_brain.evidence import Evidence, EvidenceSource, clamp_relevance


class TestClampRelevance(unittest.TestCase):
    """Relevance guard used by the blender."""

    def test_in_range_values_unchanged(self):
        for value in (0.0, 0.4, 0.7, 1.0):
            self.assertEqual(clamp_relevance(value), value)

    def test_out_of_range_values_clamped(self):
        self.assertEqual(clamp_relevance(1.7), 1.0)
        self.assertEqual(clamp_relevance(-0.2), 0.0)

    def test_non_finite_values(self):
        self.assertEqual(clamp_relevance(math.inf), 1.0)
        self.assertEqual(clamp_relevance(-math.inf), 0.0)
        self.assertEqual(clamp_relevance(math.nan), 0.0)

    def test_junk_becomes_zero(self):
        self.assertEqual(clamp_relevance(None), 0.0)
        self.assertEqual(clamp_relevance("high"), 0.0)


class TestEvidence(unittest.TestCase):

    def test_valid_relevance_check(self):
        self.assertTrue(Evidence(EvidenceSource.MEMORY, "x", 0.7).is_valid_relevance())
        self.assertFalse(Evidence(EvidenceSource.MEMORY, "x", 1.2).is_valid_relevance())
        self.assertFalse(Evidence(EvidenceSource.MEMORY, "x", math.nan).is_valid_relevance())

    def test_dict_form_uses_plain_source_tag(self):
        ev = Evidence(EvidenceSource.STRUCTURAL, "Symbol found: Foo", 1.0, {"symbol": {"name": "Foo"}})
        d = ev.to_dict()
        self.assertEqual(d["source"], "structural")
        self.assertEqual(Evidence.from_dict(d), ev)

    def test_plain_source_tag_is_normalised(self):
        ev = Evidence("semantic", "snippet", 0.4)
        self.assertIs(ev.source, EvidenceSource.SEMANTIC)
        self.assertEqual(ev.to_dict()["source"], "semantic")

    def test_unknown_source_tag_rejected(self):
        with self.assertRaises(ValueError):
            Evidence("grep", "snippet", 0.4)

    def test_from_dict_accepts_legacy_keys(self):
        ev = Evidence.from_dict({"source": "semantic", "text": "snippet", "meta": {"line": 3}})
        self.assertEqual(ev.content, "snippet")
        self.assertEqual(ev.metadata, {"line": 3})
        self.assertEqual(ev.relevance, 0.0)


if __name__ == '__main__':
    unittest.main()
