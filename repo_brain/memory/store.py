"""
Memory Store: persistent repository facts and conventions.

One JSON document per index location (<root>/.repo-brain/memory.json).
Every read path yields either a fully valid RepositoryFacts or None;
I/O problems are logged and never raised to command-level code.
"""
import os
import json
import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Optional

from repo_brain.evidence import Evidence, EvidenceSource
from repo_brain.utils.file_system import ensure_dir, read_text_safe, write_json_atomic

log = logging.getLogger(__name__)

MEMORY_FILE = "memory.json"
MEMORY_RELEVANCE = 0.7


class MalformedFactsError(ValueError):
    """The persisted document does not have the RepositoryFacts shape."""


@dataclass
class Convention:
    type: str
    description: str
    examples: list = field(default_factory=list)

    def to_dict(self) -> dict:
        d = {"type": self.type, "description": self.description}
        if self.examples:
            d["examples"] = list(self.examples)
        return d

    @staticmethod
    def from_dict(d: dict) -> "Convention":
        if not isinstance(d, dict):
            raise MalformedFactsError(f"convention must be an object, got {type(d).__name__}")
        if not isinstance(d.get("type"), str) or not isinstance(d.get("description"), str):
            raise MalformedFactsError("convention requires string 'type' and 'description'")
        examples = d.get("examples") or []
        if not isinstance(examples, list):
            raise MalformedFactsError("convention 'examples' must be a list")
        return Convention(type=d["type"], description=d["description"], examples=[str(e) for e in examples])


@dataclass
class RepositoryFacts:
    root_path: str = ""
    language: str = ""
    last_indexed: Optional[datetime] = None
    symbol_count: int = 0
    conventions: list = field(default_factory=list)

    def to_dict(self) -> dict:
        # camelCase on disk, matching the document other tooling reads
        return {
            "rootPath": self.root_path,
            "language": self.language,
            "lastIndexed": self.last_indexed.isoformat() if self.last_indexed else None,
            "symbolCount": self.symbol_count,
            "conventions": [c.to_dict() for c in self.conventions],
        }

    @staticmethod
    def from_dict(d: dict) -> "RepositoryFacts":
        if not isinstance(d, dict):
            raise MalformedFactsError(f"document must be an object, got {type(d).__name__}")

        last_indexed = d.get("lastIndexed")
        if last_indexed is not None:
            try:
                last_indexed = datetime.fromisoformat(last_indexed)
            except (TypeError, ValueError) as e:
                raise MalformedFactsError(f"bad lastIndexed: {last_indexed!r}") from e

        symbol_count = d.get("symbolCount", 0)
        if isinstance(symbol_count, bool) or not isinstance(symbol_count, int):
            raise MalformedFactsError(f"bad symbolCount: {symbol_count!r}")

        conventions = d.get("conventions") or []
        if not isinstance(conventions, list):
            raise MalformedFactsError("conventions must be a list")

        root_path = d.get("rootPath", "")
        language = d.get("language", "")
        if not isinstance(root_path, str) or not isinstance(language, str):
            raise MalformedFactsError("rootPath and language must be strings")

        return RepositoryFacts(
            root_path=root_path,
            language=language,
            last_indexed=last_indexed,
            symbol_count=symbol_count,
            conventions=[Convention.from_dict(c) for c in conventions],
        )


_FACT_FIELDS = {f.name for f in fields(RepositoryFacts)}


def _check_fact_types(partial: dict) -> None:
    """Raises TypeError for values from_dict would reject on the next load."""
    for key in ("root_path", "language"):
        if key in partial and not isinstance(partial[key], str):
            raise TypeError(f"{key} must be a str, got {type(partial[key]).__name__}")

    if "symbol_count" in partial:
        count = partial["symbol_count"]
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(f"symbol_count must be an int, got {type(count).__name__}")

    if "last_indexed" in partial and partial["last_indexed"] is not None \
            and not isinstance(partial["last_indexed"], datetime):
        raise TypeError("last_indexed must be a datetime or None")

    if "conventions" in partial and partial["conventions"] is not None:
        if any(not isinstance(c, Convention) for c in partial["conventions"]):
            raise TypeError("conventions must be Convention instances")


class MemoryStore:
    """Owns the facts document for a single index directory."""

    def __init__(self, index_path: str, memory_relevance: float = MEMORY_RELEVANCE):
        self.index_path = index_path
        self.store_path = os.path.join(index_path, MEMORY_FILE)
        self.memory_relevance = memory_relevance
        self.facts: Optional[RepositoryFacts] = None

    def init(self) -> None:
        """Creates the index directory and loads any existing document."""
        ensure_dir(self.index_path)
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.store_path):
            # First run: no document yet is not an error
            self.facts = None
            return

        content = read_text_safe(self.store_path)
        if content is None:
            log.warning(f"[Memory] Could not read {self.store_path}; keeping in-memory facts.")
            return

        try:
            self.facts = RepositoryFacts.from_dict(json.loads(content))
            log.debug(f"[Memory] Loaded repository facts from {self.store_path}")
        except (json.JSONDecodeError, MalformedFactsError) as e:
            log.error(f"[Memory] Failed to parse memory store {self.store_path}: {e}")
            self.facts = None

    def save(self) -> bool:
        if self.facts is None:
            return False

        ok = write_json_atomic(self.store_path, self.facts.to_dict())
        if ok:
            log.debug("[Memory] Saved repository facts.")
        else:
            log.error(f"[Memory] Failed to save memory store to {self.store_path}")
        return ok

    def update_facts(self, **partial) -> bool:
        """
        Shallow-merges `partial` into the current facts and persists.
        Omitted keys (including conventions) keep their previous value.
        """
        unknown = set(partial) - _FACT_FIELDS
        if unknown:
            raise TypeError(f"unknown repository fact(s): {', '.join(sorted(unknown))}")
        _check_fact_types(partial)

        if "conventions" in partial:
            partial["conventions"] = list(partial["conventions"] or [])

        base = self.facts if self.facts is not None else RepositoryFacts()
        self.facts = replace(base, **partial)
        return self.save()

    def add_convention(self, convention: Convention) -> bool:
        if self.facts is None:
            log.warning("[Memory] No repository facts yet; index the repository before adding conventions.")
            return False

        self.facts.conventions.append(convention)
        return self.save()

    def get_facts(self) -> Optional[RepositoryFacts]:
        return self.facts

    def get_memory_evidence(self, query: str) -> list:
        """Keyword-matches conventions against the query, in insertion order."""
        if self.facts is None:
            return []

        needle = query.lower()
        evidence = []
        for convention in self.facts.conventions:
            if needle in convention.description.lower() or needle in convention.type.lower():
                evidence.append(Evidence(
                    source=EvidenceSource.MEMORY,
                    content=f"Convention: {convention.type} - {convention.description}",
                    relevance=self.memory_relevance,
                    metadata={"convention": convention.to_dict()},
                ))
        return evidence
