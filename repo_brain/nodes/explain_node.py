import logging

log = logging.getLogger(__name__)


def explain_node(state, reasoner):
    """Hands the blended context to the reasoning backend."""
    context = state["context"]
    log.info(f"[Explain] Generating explanation from {len(context.evidence)} evidence items.")
    return {"response": reasoner.explain(context)}
