import os
import tempfile
import unittest

from langchain_openai import ChatOpenAI

from repo_brain.memory.store import MemoryStore
from repo_brain.retrieval.strategies import StructuralRetriever, SemanticRetriever, MemoryRetriever
from repo_brain.utils.helpers import detect_primary_language
from repo_brain.utils.instantiators import (
    index_path_for, instantiate_blender, instantiate_memory_store, instantiate_reasoner, instantiate_retrievers,
)
from repo_brain.utils.llm_client import NullReasoner, ReasoningClient

from cfg_helpers import make_cfg


class TestDefaults(unittest.TestCase):

    def test_default_config(self):
        cfg = make_cfg()
        self.assertEqual(cfg.command, "help")
        self.assertEqual(cfg.retrieval.max_items, 10)
        self.assertEqual(cfg.retrieval.relevance.structural, 1.0)
        self.assertEqual(cfg.retrieval.relevance.memory, 0.7)
        self.assertEqual(cfg.paths.index_dir, ".repo-brain")

    def test_offline_model_gives_null_reasoner(self):
        self.assertIsInstance(instantiate_reasoner(make_cfg()), NullReasoner)

    def test_lmstudio_model_wraps_chat_model(self):
        reasoner = instantiate_reasoner(make_cfg("model=lmstudio"))
        self.assertIsInstance(reasoner, ReasoningClient)
        self.assertIsInstance(reasoner.llm, ChatOpenAI)

    def test_blender_bound_follows_config(self):
        self.assertEqual(instantiate_blender(make_cfg("retrieval.max_items=3")).max_items, 3)


class TestRetrieverWiring(unittest.TestCase):

    def test_strategies_in_fixed_order(self):
        root = tempfile.mkdtemp()
        cfg = make_cfg("retrieval.relevance.structural=0.9", "retrieval.semantic_top_k=2")
        store = instantiate_memory_store(cfg, root)

        retrievers = instantiate_retrievers(cfg, root, store)

        self.assertEqual([type(r) for r in retrievers], [StructuralRetriever, SemanticRetriever, MemoryRetriever])
        self.assertEqual(retrievers[0].relevance, 0.9)
        self.assertEqual(retrievers[1].top_k, 2)
        self.assertIs(retrievers[2].store, store)

    def test_memory_store_under_index_dir(self):
        root = tempfile.mkdtemp()
        cfg = make_cfg("retrieval.relevance.memory=0.4")
        store = instantiate_memory_store(cfg, root)
        self.assertIsInstance(store, MemoryStore)
        self.assertEqual(store.index_path, os.path.join(root, ".repo-brain"))
        self.assertEqual(store.memory_relevance, 0.4)
        self.assertEqual(index_path_for(cfg, root), store.index_path)


class TestLanguageDetection(unittest.TestCase):

    def test_most_common_language_wins(self):
        self.assertEqual(detect_primary_language(["a.ts", "b.tsx", "c.py"]), "typescript")

    def test_unknown_when_nothing_recognized(self):
        self.assertEqual(detect_primary_language(["README.md"]), "unknown")
        self.assertEqual(detect_primary_language([]), "unknown")


if __name__ == '__main__':
    unittest.main()
