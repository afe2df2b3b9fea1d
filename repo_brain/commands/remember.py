"""
Remember command: records a project convention in the memory store so
later explain queries can surface it as evidence.
"""
import logging

from repo_brain.commands.explain import NO_INDEX_MESSAGE, load_memory_store
from repo_brain.memory.store import Convention

log = logging.getLogger(__name__)


def remember_command(cfg, convention_type=None, description=None, examples=None, path=None) -> int:
    conv_cfg = cfg.get("convention", None) or {}
    convention_type = convention_type or conv_cfg.get("type")
    description = description or conv_cfg.get("description")
    if examples is None:
        examples = conv_cfg.get("examples", None) or []
    if isinstance(examples, (str, int, float)):
        # convention.examples=getUser arrives as a scalar
        examples = [examples]
    examples = list(examples)

    if not convention_type or not description:
        print("Usage: repo-brain command=remember convention.type=<type> convention.description=<text>")
        return 1

    _, memory_store = load_memory_store(cfg, path)
    if memory_store.get_facts() is None:
        print(NO_INDEX_MESSAGE)
        return 1

    convention = Convention(
        type=str(convention_type),
        description=str(description),
        examples=[str(e) for e in examples],
    )
    if not memory_store.add_convention(convention):
        print("\nFailed to save the convention.")
        return 1

    log.info(f"[Memory] Added convention '{convention.type}'")
    print(f"\nRemembered convention: {convention.type} - {convention.description}")
    return 0
