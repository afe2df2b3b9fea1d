import os
import re
import ast
import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from repo_brain.utils.file_system import find_files, read_text_safe, write_json_atomic

log = logging.getLogger(__name__)

SYMBOLS_FILE = "symbols.json"

LANGUAGE_BY_EXTENSION = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

DEFAULT_EXCLUDES = ("node_modules", "dist", "build", ".git", "coverage", ".repo-brain", "__pycache__")


class SymbolKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    VARIABLE = "variable"
    TYPE = "type"
    ENUM = "enum"
    METHOD = "method"
    PROPERTY = "property"


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    file_path: str
    line: int            # 1-based
    column: int = 0      # 0-based
    end_line: Optional[int] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d

    @staticmethod
    def from_dict(d: dict) -> "Symbol":
        return Symbol(
            name=d["name"],
            kind=SymbolKind(d["kind"]),
            file_path=d["file_path"],
            line=int(d["line"]),
            column=int(d.get("column", 0)),
            end_line=d.get("end_line"),
        )


@dataclass
class CodeLocation:
    file_path: str
    start_line: int
    end_line: int
    start_column: int = 0
    end_column: int = 0


@dataclass
class ASTNode:
    type: str
    location: CodeLocation
    name: Optional[str] = None
    children: list = field(default_factory=list)


def detect_language(file_path: str) -> Optional[str]:
    return LANGUAGE_BY_EXTENSION.get(os.path.splitext(file_path)[1].lower())


# --- TypeScript / JavaScript: declaration-level regexes ---
_IDENT = r"([A-Za-z_$][\w$]*)"
_TS_PATTERNS = [
    (SymbolKind.CLASS, re.compile(rf"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+{_IDENT}")),
    (SymbolKind.INTERFACE, re.compile(rf"^\s*(?:export\s+)?(?:declare\s+)?interface\s+{_IDENT}")),
    (SymbolKind.ENUM, re.compile(rf"^\s*(?:export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+{_IDENT}")),
    (SymbolKind.TYPE, re.compile(rf"^\s*(?:export\s+)?(?:declare\s+)?type\s+{_IDENT}\s*(?:<[^=]*>)?\s*=")),
    (SymbolKind.FUNCTION, re.compile(rf"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*{_IDENT}")),
    (SymbolKind.VARIABLE, re.compile(rf"^\s*(?:export\s+)?(?:declare\s+)?(?:const|let|var)\s+{_IDENT}")),
]
_ARROW_RE = re.compile(r"=\s*(?:async\s*)?(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*(?::\s*[^=]+)?=>")


def _extract_ts_symbols(content: str, file_path: str) -> list:
    symbols = []
    for lineno, text in enumerate(content.splitlines(), 1):
        for kind, pattern in _TS_PATTERNS:
            m = pattern.match(text)
            if not m:
                continue
            if kind == SymbolKind.VARIABLE and _ARROW_RE.search(text, m.end(1)):
                kind = SymbolKind.FUNCTION
            symbols.append(Symbol(m.group(1), kind, file_path, lineno, m.start(1), lineno))
            break
    return symbols


def _extract_python_symbols(content: str, file_path: str) -> list:
    try:
        tree = ast.parse(content, filename=file_path)
    except (SyntaxError, ValueError) as e:
        log.debug(f"[SymbolTool] Skipping unparseable {file_path}: {e}")
        return []

    symbols = []

    def visit(body, in_class: bool):
        for node in body:
            if isinstance(node, ast.ClassDef):
                symbols.append(Symbol(node.name, SymbolKind.CLASS, file_path,
                                      node.lineno, node.col_offset, node.end_lineno))
                visit(node.body, in_class=True)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kind = SymbolKind.METHOD if in_class else SymbolKind.FUNCTION
                symbols.append(Symbol(node.name, kind, file_path,
                                      node.lineno, node.col_offset, node.end_lineno))
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                kind = SymbolKind.PROPERTY if in_class else SymbolKind.VARIABLE
                for target in targets:
                    if isinstance(target, ast.Name):
                        symbols.append(Symbol(target.id, kind, file_path,
                                              node.lineno, target.col_offset, node.end_lineno))

    visit(tree.body, in_class=False)
    return symbols


def extract_symbols(content: str, file_path: str) -> list:
    """Extracts declaration-level symbols; unknown file types yield []."""
    language = detect_language(file_path)
    if language == "python":
        return _extract_python_symbols(content, file_path)
    if language in ("typescript", "javascript"):
        return _extract_ts_symbols(content, file_path)
    return []


class SymbolTool:
    name = "symbols"
    description = "Structural symbol table built from source declarations"
    capabilities = ["symbol_lookup", "structural_index"]

    def __init__(self, index_path: str, extensions=None, exclude_patterns=DEFAULT_EXCLUDES):
        self.index_path = index_path
        self.store_path = os.path.join(index_path, SYMBOLS_FILE)
        self.extensions = tuple(extensions or LANGUAGE_BY_EXTENSION.keys())
        self.exclude_patterns = tuple(exclude_patterns)
        self.symbols: dict = {}   # file path -> [Symbol]

    def parse_file(self, file_path: str) -> list:
        content = read_text_safe(file_path)
        if content is None:
            return []
        return extract_symbols(content, file_path)

    def parse_content(self, content: str, file_path: str) -> Optional[ASTNode]:
        """File outline: a module node with one child per declared symbol."""
        if detect_language(file_path) is None:
            return None
        lines = content.splitlines() or [""]
        children = [
            ASTNode(
                type=s.kind.value,
                name=s.name,
                location=CodeLocation(file_path, s.line, s.end_line or s.line, s.column),
            )
            for s in extract_symbols(content, file_path)
        ]
        return ASTNode(
            type="module",
            name=os.path.basename(file_path),
            location=CodeLocation(file_path, 1, len(lines), 0, len(lines[-1])),
            children=children,
        )

    def index_file(self, file_path: str, content: str) -> list:
        """Replaces whatever this path contributed before."""
        found = extract_symbols(content, file_path)
        if found:
            self.symbols[file_path] = found
        else:
            self.symbols.pop(file_path, None)
        return found

    def symbol_count(self) -> int:
        return sum(len(v) for v in self.symbols.values())

    def clear(self) -> None:
        self.symbols = {}

    def save(self) -> bool:
        data = {path: [s.to_dict() for s in syms] for path, syms in self.symbols.items()}
        return write_json_atomic(self.store_path, data)

    def load(self) -> bool:
        content = read_text_safe(self.store_path)
        if content is None:
            self.symbols = {}
            return False
        try:
            data = json.loads(content)
            self.symbols = {path: [Symbol.from_dict(s) for s in syms] for path, syms in data.items()}
            return True
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            log.error(f"[SymbolTool] Corrupt symbol table {self.store_path}: {e}")
            self.symbols = {}
            return False

    def find_symbol(self, symbol_name: str, root_path: str) -> Optional[Symbol]:
        """
        First definition named `symbol_name`. Uses the persisted table; when
        nothing has been indexed, scans `root_path` directly.
        """
        symbol_name = symbol_name.strip()
        if not symbol_name:
            return None

        if self.symbols:
            candidates = (s for syms in self.symbols.values() for s in syms)
        else:
            log.debug(f"[SymbolTool] Empty symbol table, scanning {root_path}")
            candidates = (
                s
                for path in find_files(root_path, self.extensions, self.exclude_patterns)
                for s in self.parse_file(path)
            )

        for symbol in candidates:
            if symbol.name == symbol_name:
                return symbol
        return None
