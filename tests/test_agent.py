import unittest
from unittest.mock import MagicMock

from repo_brain.agent import Agent
from repo_brain.evidence import Evidence, EvidenceSource, ExplanationResponse
from repo_brain.memory.store import RepositoryFacts
from repo_brain.retrieval.blender import EvidenceBlender
from repo_brain.utils.llm_client import NullReasoner


def retriever(name, items=None, error=None):
    r = MagicMock()
    r.name = name
    if error:
        r.retrieve.side_effect = error
    else:
        r.retrieve.return_value = items or []
    return r


class TestExplainGraph(unittest.TestCase):
    """retrieval_node -> explain_node"""

    def setUp(self):
        self.facts = RepositoryFacts(root_path="/repo", language="typescript", symbol_count=42)
        self.structural = Evidence(EvidenceSource.STRUCTURAL, "Symbol found: Foo (class) at a.ts:10", 1.0)
        self.semantic = Evidence(EvidenceSource.SEMANTIC, "a.ts:8\nexport class Foo {}", 0.4)

    def test_structural_first_semantic_second(self):
        agent = Agent(
            retrievers=[retriever("semantic", [self.semantic]), retriever("structural", [self.structural])],
            reasoner=NullReasoner(),
        )
        context, response = agent.explain("Foo", repo_facts=self.facts)

        self.assertEqual(context.query, "Foo")
        self.assertEqual(context.evidence, [self.structural, self.semantic])
        self.assertIs(context.repo_facts, self.facts)
        self.assertIsInstance(response, ExplanationResponse)

    def test_every_retriever_sees_the_query(self):
        retrievers = [retriever("a"), retriever("b"), retriever("c")]
        Agent(retrievers, NullReasoner()).explain("Foo")
        for r in retrievers:
            r.retrieve.assert_called_once_with("Foo")

    def test_failing_retriever_does_not_stop_the_pipeline(self):
        agent = Agent(
            retrievers=[retriever("structural", error=RuntimeError("boom")),
                        retriever("semantic", [self.semantic])],
            reasoner=NullReasoner(),
        )
        context, response = agent.explain("Foo")
        self.assertEqual(context.evidence, [self.semantic])
        self.assertIn("Evidence found: 1 items", response.explanation)

    def test_reasoner_receives_bounded_context(self):
        items = [Evidence(EvidenceSource.SEMANTIC, f"chunk {i}", i / 10) for i in range(8)]
        reasoner = MagicMock()
        reasoner.explain.return_value = ExplanationResponse(explanation="done")

        agent = Agent([retriever("semantic", items)], reasoner, EvidenceBlender(max_items=3))
        context, response = agent.explain("Foo")

        reasoner.explain.assert_called_once()
        passed = reasoner.explain.call_args[0][0]
        self.assertEqual([e.content for e in passed.evidence], ["chunk 7", "chunk 6", "chunk 5"])
        self.assertEqual(response.explanation, "done")


if __name__ == '__main__':
    unittest.main()
