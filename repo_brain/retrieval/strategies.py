"""
Retrieval strategies: every evidence source exposes `retrieve(query) -> list[Evidence]`
so the blender can treat them uniformly. Strategies share no mutable state.
"""
import os
import logging
from abc import ABC, abstractmethod

from repo_brain.evidence import Evidence, EvidenceSource

log = logging.getLogger(__name__)

STRUCTURAL_RELEVANCE = 1.0
SEMANTIC_TOP_K = 5


class Retriever(ABC):
    name = "retriever"
    description = ""
    source: EvidenceSource = None

    @abstractmethod
    def retrieve(self, query: str) -> list:
        """Returns zero or more Evidence items for the query."""


class StructuralRetriever(Retriever):
    name = "structural"
    description = "Authoritative symbol definition lookup"
    source = EvidenceSource.STRUCTURAL

    def __init__(self, symbol_tool, root_path: str, relevance: float = STRUCTURAL_RELEVANCE):
        self.symbol_tool = symbol_tool
        self.root_path = root_path
        self.relevance = relevance

    def retrieve(self, query: str) -> list:
        symbol = self.symbol_tool.find_symbol(query, self.root_path)
        if symbol is None:
            return []

        location = os.path.relpath(symbol.file_path, self.root_path) \
            if os.path.isabs(symbol.file_path) else symbol.file_path
        return [Evidence(
            source=EvidenceSource.STRUCTURAL,
            content=f"Symbol found: {symbol.name} ({symbol.kind.value}) at {location}:{symbol.line}",
            relevance=self.relevance,
            metadata={"symbol": symbol.to_dict()},
        )]


class SemanticRetriever(Retriever):
    name = "semantic"
    description = "Embedding similarity over indexed code chunks"
    source = EvidenceSource.SEMANTIC

    def __init__(self, search, top_k: int = SEMANTIC_TOP_K):
        self.search = search
        self.top_k = top_k

    def retrieve(self, query: str) -> list:
        return self.search.search(query, self.top_k)


class MemoryRetriever(Retriever):
    name = "memory"
    description = "Keyword match against remembered project conventions"
    source = EvidenceSource.MEMORY

    def __init__(self, store):
        self.store = store

    def retrieve(self, query: str) -> list:
        return self.store.get_memory_evidence(query)


def gather_evidence(query: str, retrievers) -> list:
    """
    Runs each retriever independently. A failing retriever contributes
    nothing; the rest of the pipeline carries on with what the others found.
    """
    collected = []
    for retriever in retrievers:
        try:
            found = retriever.retrieve(query)
        except Exception as e:
            log.warning(f"[Retrieval] {retriever.name} retrieval failed for '{query[:50]}': {e}")
            continue
        log.info(f"[Retrieval] {retriever.name} returned {len(found)} evidence items.")
        collected.extend(found)
    return collected
