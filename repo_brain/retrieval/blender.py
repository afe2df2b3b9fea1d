import logging
from dataclasses import replace

from repo_brain.evidence import ReasoningContext, clamp_relevance

log = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 10


class EvidenceBlender:
    """
    Merges evidence from every retrieval strategy into one ranked, bounded list.

    Ranking is a stable sort on relevance alone: ties keep their input order,
    so the same input list always blends to the same output. Near-duplicate
    content is kept and sources are not rebalanced.
    """

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS):
        if max_items < 0:
            raise ValueError(f"max_items must be non-negative, got {max_items}")
        self.max_items = max_items

    def blend_evidence(self, evidences, max_items: int = DEFAULT_MAX_ITEMS) -> list:
        if max_items < 0:
            raise ValueError(f"max_items must be non-negative, got {max_items}")

        log.debug(f"[Blender] Blending {len(evidences)} pieces of evidence (max {max_items}).")

        checked = []
        for ev in evidences:
            if not ev.is_valid_relevance():
                clamped = clamp_relevance(ev.relevance)
                log.warning(
                    f"[Blender] Relevance {ev.relevance!r} from {ev.source.value} evidence "
                    f"is outside [0, 1]; clamped to {clamped}."
                )
                ev = replace(ev, relevance=clamped)
            checked.append(ev)

        ranked = sorted(checked, key=lambda e: e.relevance, reverse=True)
        return ranked[:max_items]

    def build_context(self, query: str, evidences, repo_facts=None) -> ReasoningContext:
        blended = self.blend_evidence(evidences, self.max_items)
        return ReasoningContext(query=query, evidence=blended, repo_facts=repo_facts)
