from typing import Optional, TypedDict

from repo_brain.evidence import ExplanationResponse, ReasoningContext
from repo_brain.memory.store import RepositoryFacts


class ExplainState(TypedDict, total=False):
    query: str                          # Symbol or concept to explain
    repo_facts: Optional[RepositoryFacts]
    context: ReasoningContext           # Ranked, bounded evidence
    response: ExplanationResponse
