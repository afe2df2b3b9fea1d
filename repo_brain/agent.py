from langgraph.graph import StateGraph, START, END

from repo_brain.state import ExplainState
from repo_brain.nodes.retrieval_node import retrieval_node
from repo_brain.nodes.explain_node import explain_node
from repo_brain.retrieval.blender import EvidenceBlender


class Agent:
    def __init__(self, retrievers, reasoner, blender=None):
        self.retrievers = list(retrievers)
        self.reasoner = reasoner
        self.blender = blender or EvidenceBlender()
        self.app = self.build_graph()

    def build_graph(self):
        """Constructs and compiles the explain StateGraph."""
        builder = StateGraph(ExplainState)

        builder.add_node("retrieval_node", lambda state: retrieval_node(state, self.retrievers, self.blender))
        builder.add_node("explain_node", lambda state: explain_node(state, self.reasoner))

        builder.add_edge(START, "retrieval_node")
        builder.add_edge("retrieval_node", "explain_node")
        builder.add_edge("explain_node", END)

        return builder.compile()

    def explain(self, query: str, repo_facts=None):
        """Returns (ReasoningContext, ExplanationResponse) for the query."""
        result = self.app.invoke({"query": query, "repo_facts": repo_facts})
        return result["context"], result["response"]
