import os
import json
import logging
import tempfile

log = logging.getLogger(__name__)


def find_files(root_dir: str, extensions, exclude_patterns=()) -> list:
    """
    Recursively collects files under root_dir whose extension is in `extensions`.
    Any path containing one of `exclude_patterns` as a component is skipped.
    """
    extensions = tuple(ext.lower() for ext in extensions)
    excluded = set(exclude_patterns)
    results = []

    for dirpath, dirnames, filenames in os.walk(root_dir):
        # Prune in place so os.walk never descends into excluded dirs
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in sorted(filenames):
            if filename in excluded:
                continue
            if filename.lower().endswith(extensions):
                results.append(os.path.join(dirpath, filename))

    return results


def ensure_dir(dir_path: str) -> bool:
    try:
        os.makedirs(dir_path, exist_ok=True)
        return True
    except OSError as e:
        log.warning(f"[FileSystem] Could not create {dir_path}: {e}")
        return False


def read_text_safe(file_path: str):
    """Returns file contents, or None if the file is missing or unreadable."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        log.warning(f"[FileSystem] Could not read {file_path}: {e}")
        return None


def write_json_atomic(file_path: str, data) -> bool:
    """
    Pretty-prints `data` to file_path via a temp file + os.replace,
    so readers only ever see the old document or the new one.
    """
    dir_path = os.path.dirname(file_path) or "."
    if not ensure_dir(dir_path):
        return False

    try:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        log.error(f"[FileSystem] Could not serialize {file_path}: {e}")
        return False

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=dir_path, prefix=".tmp_", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_path, file_path)
        return True
    except OSError as e:
        log.error(f"[FileSystem] Failed to write {file_path}: {e}")
        if tmp_path and os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        return False
