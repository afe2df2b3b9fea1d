"""
Explain command: gathers evidence for a symbol and asks the reasoning
backend to explain it.
"""
import os
import logging

from repo_brain.agent import Agent
from repo_brain.utils.instantiators import (
    instantiate_blender, instantiate_memory_store, instantiate_reasoner, instantiate_retrievers,
)

log = logging.getLogger(__name__)

NO_INDEX_MESSAGE = "\nNo index found. Please run 'repo-brain command=index' first."


def load_memory_store(cfg, path):
    root_path = os.path.abspath(path or cfg.get("path") or os.getcwd())
    memory_store = instantiate_memory_store(cfg, root_path)
    memory_store.init()
    return root_path, memory_store


def explain_command(cfg, query=None, path=None) -> int:
    query = (query if query is not None else cfg.get("query")) or ""
    query = str(query).strip()
    if not query:
        print("Usage: repo-brain command=explain query=<symbol>")
        return 1

    log.info(f"[Explain] Explaining: {query}")
    root_path, memory_store = load_memory_store(cfg, path)

    facts = memory_store.get_facts()
    if facts is None:
        print(NO_INDEX_MESSAGE)
        return 1

    log.info("[Explain] Gathering evidence...")
    agent = Agent(
        retrievers=instantiate_retrievers(cfg, root_path, memory_store),
        reasoner=instantiate_reasoner(cfg),
        blender=instantiate_blender(cfg),
    )
    context, response = agent.explain(query, repo_facts=facts)

    print(f'\nExplanation for "{query}":')
    print("─" * 60)
    print(response.explanation)

    if response.sources:
        print("\n" + "─" * 60)
        print("Sources:")
        for i, source in enumerate(response.sources, 1):
            snippet = source.content.replace("\n", " ")
            if len(snippet) > 100:
                snippet = snippet[:100] + "..."
            print(f"  {i}. [{source.source.value}] {snippet}")

    if response.confidence is not None:
        print(f"\nConfidence: {response.confidence:.0%}")
    print("─" * 60)
    return 0
