import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

from langchain_core.embeddings import DeterministicFakeEmbedding

from repo_brain.evidence import EvidenceSource
from repo_brain.tools.semantic_tool import SemanticSearch

FOO_SOURCE = "export class Foo {\n  bar() { return 1; }\n}"
BAZ_SOURCE = "def baz():\n    return 'baz'"


class TestSemanticSearch(unittest.TestCase):
    """FAISS index over code chunks, with deterministic fake embeddings."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.index_path = os.path.join(self.tmp, ".repo-brain")
        self.factory = MagicMock(side_effect=lambda: DeterministicFakeEmbedding(size=32))
        self.search = SemanticSearch(self.index_path, self.factory, chunk_size=200, chunk_overlap=0)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_empty_index_returns_nothing(self):
        self.assertEqual(self.search.search("Foo"), [])
        self.factory.assert_not_called()

    def test_exact_chunk_is_most_relevant(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.search.index_code("lib/baz.py", BAZ_SOURCE)

        results = self.search.search(FOO_SOURCE, top_k=2)
        self.assertEqual(len(results), 2)
        top = results[0]
        self.assertEqual(top.source, EvidenceSource.SEMANTIC)
        self.assertEqual(top.relevance, 1.0)
        self.assertTrue(top.content.startswith("src/foo.ts:1\n"))
        self.assertEqual(top.metadata, {"file_path": "src/foo.ts", "line": 1})
        for ev in results:
            self.assertTrue(0.0 <= ev.relevance <= 1.0)

    def test_top_k_bounds_results(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.search.index_code("lib/baz.py", BAZ_SOURCE)
        self.assertEqual(len(self.search.search("anything", top_k=1)), 1)
        self.assertEqual(self.search.search("anything", top_k=0), [])

    def test_reindexing_replaces_previous_chunks(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        first = self.search.chunk_count()
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.assertEqual(self.search.chunk_count(), first)

        self.search.index_code("src/foo.ts", "export const x = 1;")
        results = self.search.search("export const x = 1;", top_k=5)
        self.assertEqual(len(results), 1)
        self.assertIn("export const x = 1;", results[0].content)

    def test_chunks_record_start_line(self):
        long_source = "\n".join(f"export const value{i} = {i};" for i in range(40))
        self.search.index_code("src/values.ts", long_source)
        lines = sorted(ev.metadata["line"] for ev in self.search.search("value", top_k=50))
        self.assertGreater(len(lines), 1)
        self.assertEqual(lines[0], 1)
        self.assertGreater(lines[-1], 1)

    def test_save_and_load(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.assertTrue(self.search.save())

        reloaded = SemanticSearch(self.index_path, lambda: DeterministicFakeEmbedding(size=32))
        results = reloaded.search(FOO_SOURCE, top_k=1)
        self.assertEqual(results[0].metadata["file_path"], "src/foo.ts")

    def test_clear_index(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.search.save()
        self.search.clear_index()
        self.assertFalse(os.path.exists(self.search.db_path))
        self.assertEqual(self.search.search("Foo"), [])

    def test_embeddings_built_once(self):
        self.search.index_code("src/foo.ts", FOO_SOURCE)
        self.search.index_code("lib/baz.py", BAZ_SOURCE)
        self.search.search("Foo")
        self.assertEqual(self.factory.call_count, 1)


if __name__ == '__main__':
    unittest.main()
