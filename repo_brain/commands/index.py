"""
Index command: scans a repository, builds the symbol table and the semantic
index, then records repository facts in the memory store.
"""
import os
import logging
from datetime import datetime

from repo_brain.utils.file_system import find_files, read_text_safe
from repo_brain.utils.helpers import detect_primary_language
from repo_brain.utils.instantiators import (
    index_path_for, instantiate_memory_store, instantiate_symbol_tool, instantiate_semantic_search,
)

log = logging.getLogger(__name__)


def _prepare_semantic(cfg, root_path):
    """SemanticSearch with embeddings ready, or None if they can't be built."""
    if not cfg.indexing.get("semantic", True):
        return None
    semantic = instantiate_semantic_search(cfg, root_path)
    try:
        semantic.embeddings
    except Exception as e:
        log.warning(f"[Index] Embeddings unavailable, skipping semantic index: {e}")
        return None
    semantic.clear_index()
    return semantic


def index_command(cfg, path=None) -> int:
    absolute_path = os.path.abspath(path or cfg.get("path") or os.getcwd())
    log.info(f"[Index] Indexing repository at: {absolute_path}")

    if not os.path.exists(absolute_path):
        log.error(f"[Index] Path does not exist: {absolute_path}")
        print(f"\nPath does not exist: {absolute_path}")
        return 1
    if not os.path.isdir(absolute_path):
        log.error(f"[Index] Path must be a directory: {absolute_path}")
        print(f"\nPath must be a directory: {absolute_path}")
        return 1

    memory_store = instantiate_memory_store(cfg, absolute_path)
    memory_store.init()

    symbol_tool = instantiate_symbol_tool(cfg, absolute_path)
    semantic = _prepare_semantic(cfg, absolute_path)

    files = find_files(absolute_path, list(cfg.indexing.extensions), list(cfg.indexing.exclude))
    log.info(f"[Index] Found {len(files)} files to index")

    for i, file_path in enumerate(files, 1):
        relative_path = os.path.relpath(file_path, absolute_path)
        log.debug(f"[Index] [{i}/{len(files)}] Processing: {relative_path}")

        content = read_text_safe(file_path)
        if content is None:
            log.warning(f"[Index] Failed to read {relative_path}")
            continue

        try:
            symbol_tool.index_file(file_path, content)
        except Exception as e:
            log.warning(f"[Index] Failed to extract symbols from {relative_path}: {e!r}")

        if semantic is not None:
            try:
                semantic.index_code(file_path, content)
            except Exception as e:
                log.warning(f"[Index] Failed to embed {relative_path}: {e}")

    if not symbol_tool.save():
        log.warning("[Index] Symbol table was not saved; explain will scan sources directly.")

    if semantic is not None:
        try:
            semantic.save()
        except Exception as e:
            log.warning(f"[Index] Failed to save semantic index: {e}")

    symbol_count = symbol_tool.symbol_count()
    saved = memory_store.update_facts(
        root_path=absolute_path,
        language=detect_primary_language(files),
        last_indexed=datetime.now(),
        symbol_count=symbol_count,
    )
    if not saved:
        print("\nIndexing finished but repository facts could not be saved.")
        return 1

    index_path = index_path_for(cfg, absolute_path)
    log.info("[Index] Indexing complete!")
    log.info(f"[Index]   Files processed: {len(files)}")
    log.info(f"[Index]   Symbols found: {symbol_count}")
    log.info(f"[Index]   Index stored at: {index_path}")

    print("\nRepository indexed successfully!")
    print("You can now use 'repo-brain command=explain query=<symbol>' to explore your code.")
    return 0
