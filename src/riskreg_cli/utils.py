from __future__ import annotations
import os, json, logging
from typing import Any, Iterable, Iterator, List, Optional, Tuple
from pathspec import PathSpec

from .config import Config
from .errors import WorkspaceError

logger = logging.getLogger(__name__)

SOURCE_EXT = {".go", ".py", ".js", ".jsx", ".ts", ".tsx", ".java", ".rb", ".cs"}
SKIP_DIRS = {".git", "vendor", "node_modules", "__pycache__", ".venv", "dist", "build"}


def find_repo_root(start: str) -> str:
    start = os.path.abspath(start)
    p = start
    while p and p != os.path.dirname(p):
        if os.path.exists(os.path.join(p, ".git")):
            return p
        p = os.path.dirname(p)
    return start


def load_gitignore(repo_root: str) -> PathSpec:
    path = os.path.join(repo_root, ".gitignore")
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            return PathSpec.from_lines("gitwildmatch", f)
    return PathSpec.from_lines("gitwildmatch", [])


def language_for(path: str, extensions: Optional[Iterable[str]] = None) -> Optional[str]:
    ext = os.path.splitext(path)[1]
    allowed = set(extensions) if extensions is not None else SOURCE_EXT
    return ext if ext in allowed else None


def discover_files(repo_root: str, cfg: Optional[Config] = None) -> List[Tuple[str, str]]:
    """Return ``(path, language)`` pairs under ``repo_root`` in lexical order."""
    if not os.path.isdir(repo_root):
        raise WorkspaceError(f"workspace root is not a directory: {repo_root}")

    data = cfg.data if cfg is not None else {}
    skip = set(data.get("skip_dirs", SKIP_DIRS))
    extensions = set(data.get("extensions", SOURCE_EXT))
    ignore = load_gitignore(repo_root)
    exclude_spec = PathSpec.from_lines("gitwildmatch", data.get("exclude", []))

    found: List[Tuple[str, str, str]] = []
    for root, dirs, files in os.walk(repo_root):
        dirs[:] = [d for d in dirs if d not in skip]
        for name in files:
            abspath = os.path.join(root, name)
            rel = os.path.relpath(abspath, repo_root).replace(os.sep, "/")
            lang = language_for(name, extensions)
            if lang is None:
                continue
            if ignore.match_file(rel) or exclude_spec.match_file(rel):
                logger.debug("Excluded %s", rel)
                continue
            found.append((rel, abspath, lang))

    found.sort()
    return [(abspath, lang) for _, abspath, lang in found]


def iter_lines(path: str) -> Iterator[Tuple[int, Optional[str]]]:
    """Yield ``(line_no, text)``; text is None for lines that are not valid UTF-8.

    Opening errors propagate to the caller.
    """
    with open(path, "rb") as f:
        for line_no, raw in enumerate(f, start=1):
            raw = raw.rstrip(b"\n")
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            try:
                yield line_no, raw.decode("utf-8")
            except UnicodeDecodeError:
                yield line_no, None


def write_json(result: Any, repo_root: str) -> str:
    path = os.path.join(repo_root, "risk-register.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, default=str)
    logger.info("Wrote %s", path)
    return path
