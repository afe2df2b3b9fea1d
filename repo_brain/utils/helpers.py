import os
import logging
from collections import Counter

from repo_brain.tools.symbol_tool import detect_language


def configure_logging(cfg):
    """Applies cfg.log_level to the package logger and quiets chatty libraries."""
    level = getattr(logging, str(cfg.get("log_level", "INFO")).upper(), logging.INFO)
    logging.getLogger("repo_brain").setLevel(level)

    # Silences the "Loading weights" progress bars and info logs
    os.environ.setdefault("TRANSFORMERS_VERBOSITY", "error")
    for noisy in ("httpx", "faiss", "sentence_transformers"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def detect_primary_language(files) -> str:
    """Most common language among `files`; 'unknown' when none is recognized."""
    counts = Counter(lang for lang in (detect_language(f) for f in files) if lang)
    if not counts:
        return "unknown"
    # Ties go to the alphabetically first language, for stable output
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0][0]
