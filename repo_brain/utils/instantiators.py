# repo_brain/utils/instantiators.py
import os
import hydra
from omegaconf import DictConfig

from repo_brain.memory.store import MemoryStore
from repo_brain.retrieval.blender import EvidenceBlender
from repo_brain.retrieval.strategies import StructuralRetriever, SemanticRetriever, MemoryRetriever
from repo_brain.tools.symbol_tool import SymbolTool
from repo_brain.tools.semantic_tool import SemanticSearch
from repo_brain.utils.llm_client import ReasoningClient, NullReasoner


def instantiate_reasoner(cfg: DictConfig):
    """
    Wraps the configured chat model. Returns NullReasoner if
    model._target_ is null or missing.
    """
    model_cfg = cfg.get("model", None)
    if model_cfg is None or model_cfg.get("_target_") is None:
        return NullReasoner()
    return ReasoningClient(hydra.utils.instantiate(model_cfg))

def instantiate_embeddings_factory(cfg: DictConfig):
    embeddings_cfg = cfg.embeddings
    return lambda: hydra.utils.instantiate(embeddings_cfg)

def instantiate_blender(cfg: DictConfig) -> EvidenceBlender:
    return EvidenceBlender(max_items=cfg.retrieval.max_items)

def index_path_for(cfg: DictConfig, root_path: str) -> str:
    return os.path.join(root_path, cfg.paths.index_dir)

def instantiate_memory_store(cfg: DictConfig, root_path: str) -> MemoryStore:
    return MemoryStore(
        index_path_for(cfg, root_path),
        memory_relevance=cfg.retrieval.relevance.memory,
    )

def instantiate_symbol_tool(cfg: DictConfig, root_path: str) -> SymbolTool:
    return SymbolTool(
        index_path_for(cfg, root_path),
        extensions=list(cfg.indexing.extensions),
        exclude_patterns=list(cfg.indexing.exclude),
    )

def instantiate_semantic_search(cfg: DictConfig, root_path: str) -> SemanticSearch:
    return SemanticSearch(
        index_path_for(cfg, root_path),
        instantiate_embeddings_factory(cfg),
        chunk_size=cfg.chunking.chunk_size,
        chunk_overlap=cfg.chunking.chunk_overlap,
    )

def instantiate_retrievers(cfg: DictConfig, root_path: str, store: MemoryStore) -> list:
    """Structural, semantic and memory strategies, in that order."""
    symbol_tool = instantiate_symbol_tool(cfg, root_path)
    symbol_tool.load()
    return [
        StructuralRetriever(symbol_tool, root_path, relevance=cfg.retrieval.relevance.structural),
        SemanticRetriever(instantiate_semantic_search(cfg, root_path), top_k=cfg.retrieval.semantic_top_k),
        MemoryRetriever(store),
    ]
