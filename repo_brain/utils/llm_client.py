import json
import logging
from langchain_openai import ChatOpenAI
from langchain_core.messages import SystemMessage, HumanMessage

from repo_brain.evidence import ExplanationResponse, clamp_relevance

log = logging.getLogger(__name__)


def LMStudioClient(base_url: str, model_name: str, temperature: float):
    return ChatOpenAI(base_url=base_url, model=model_name, temperature=temperature, api_key="lm-studio")

def OllamaClient(base_url: str, model_name: str, temperature: float):
    return ChatOpenAI(base_url=base_url, model=model_name, temperature=temperature, api_key="ollama")


def format_evidence(evidence: list, max_chars: int = 1500) -> str:
    """Numbered evidence block; the numbers are what the model cites."""
    block = ""
    for i, ev in enumerate(evidence, 1):
        block += (
            f"--- [Evidence {i}] [{ev.source.value.upper()}] (Rel: {ev.relevance}) ---\n"
            f"{ev.content[:max_chars]}\n\n"
        )
    return block


def format_facts(repo_facts) -> str:
    if repo_facts is None:
        return ""
    return (
        f"REPOSITORY: {repo_facts.root_path} "
        f"(language: {repo_facts.language}, symbols: {repo_facts.symbol_count})\n\n"
    )


class ReasoningClient:
    """Turns a ReasoningContext into an explanation via a chat model."""

    def __init__(self, llm):
        self.llm = llm

    def explain(self, context) -> ExplanationResponse:
        log.debug(f"[LLM] Generating explanation for: {context.query}")

        system_prompt = (
            "You are Repo Brain, an assistant that explains code symbols. "
            "Answer ONLY from the provided evidence. Evidence is ordered by relevance.\n"
            'Respond in JSON format ONLY: {"explanation": str, "cited": [int], "confidence": float}\n'
            "where 'cited' lists the [Evidence N] numbers you relied on and "
            "'confidence' is between 0.0 and 1.0."
        )
        prompt = (
            f"{format_facts(context.repo_facts)}"
            f"SYMBOL: {context.query}\n\n"
            f"EVIDENCE:\n{format_evidence(context.evidence) or 'None found.'}"
        )

        response = self.llm.invoke([SystemMessage(content=system_prompt), HumanMessage(content=prompt)])
        content = response.content.strip()

        try:
            result = json.loads(content.replace("```json", "").replace("```", "").strip())
            if not isinstance(result, dict):
                raise ValueError("expected a JSON object")
        except ValueError:
            log.warning("[LLM] Reply was not JSON; using raw text and all evidence as sources.")
            return ExplanationResponse(explanation=content, sources=list(context.evidence), confidence=None)

        sources = []
        for n in result.get("cited", []) or []:
            if isinstance(n, int) and not isinstance(n, bool) and 1 <= n <= len(context.evidence):
                ev = context.evidence[n - 1]
                if ev not in sources:
                    sources.append(ev)

        confidence = result.get("confidence")
        if confidence is not None:
            confidence = clamp_relevance(confidence)

        return ExplanationResponse(
            explanation=str(result.get("explanation", "")),
            sources=sources,
            confidence=confidence,
        )

    def ask(self, question: str, context) -> str:
        log.debug(f"[LLM] Asking: {question}")
        prompt = (
            f"{format_facts(context.repo_facts)}"
            f"QUESTION: {question}\n\n"
            f"EVIDENCE:\n{format_evidence(context.evidence) or 'None found.'}\n"
            "Cite evidence by [Evidence N] tags inline."
        )
        response = self.llm.invoke([
            SystemMessage(content="You are Repo Brain. Answer questions about this codebase from the evidence."),
            HumanMessage(content=prompt),
        ])
        return response.content


class NullReasoner:
    """Offline stand-in used when no chat model is configured."""

    def explain(self, context) -> ExplanationResponse:
        return ExplanationResponse(
            explanation=(
                f'This is a placeholder explanation for "{context.query}".\n\n'
                "To enable AI-powered explanations, configure a model "
                "(e.g. `model=lmstudio` or `model=ollama`).\n\n"
                f"Evidence found: {len(context.evidence)} items"
            ),
            sources=list(context.evidence),
            confidence=0.5,
        )

    def ask(self, question: str, context) -> str:
        return f"Placeholder answer for: {question}"
