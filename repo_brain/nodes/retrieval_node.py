import logging

from repo_brain.retrieval.strategies import gather_evidence

log = logging.getLogger(__name__)


def retrieval_node(state, retrievers, blender):
    """
    Queries every retrieval strategy, then ranks and bounds the merged
    evidence into a ReasoningContext.
    """
    query = state["query"]
    collected = gather_evidence(query, retrievers)

    context = blender.build_context(query, collected, repo_facts=state.get("repo_facts"))
    log.info(f"[Retrieval] Kept {len(context.evidence)} of {len(collected)} evidence items.")
    return {"context": context}
