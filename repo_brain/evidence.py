import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from repo_brain.memory.store import RepositoryFacts


class EvidenceSource(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    MEMORY = "memory"


def clamp_relevance(value) -> float:
    """Coerces a relevance score into [0.0, 1.0]. NaN and junk become 0.0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


@dataclass
class Evidence:
    """
    Unified evidence object emitted by ALL retrieval strategies.
    The source tag says which one produced it.
    """
    source: EvidenceSource
    content: str             # Human-readable finding (location, snippet, convention)
    relevance: float = 0.0   # 0.0–1.0, not calibrated across sources
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        # Accept plain "semantic" etc.; unknown tags raise ValueError
        self.source = EvidenceSource(self.source)

    def is_valid_relevance(self) -> bool:
        return isinstance(self.relevance, (int, float)) and math.isfinite(self.relevance) \
            and 0.0 <= self.relevance <= 1.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["source"] = self.source.value
        return d

    @staticmethod
    def from_dict(d: dict) -> "Evidence":
        return Evidence(
            source=EvidenceSource(d.get("source", EvidenceSource.SEMANTIC.value)),
            content=d.get("content", d.get("text", "")),
            relevance=d.get("relevance", 0.0),
            metadata=d.get("metadata", d.get("meta", {})),
        )


@dataclass
class ReasoningContext:
    """Query plus ranked, bounded evidence. Evidence order is meaningful."""
    query: str
    evidence: list = field(default_factory=list)
    repo_facts: Optional["RepositoryFacts"] = None


@dataclass
class ExplanationResponse:
    explanation: str
    sources: list = field(default_factory=list)   # Evidence actually cited
    confidence: Optional[float] = None
