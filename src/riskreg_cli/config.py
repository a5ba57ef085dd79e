from __future__ import annotations
import copy, logging, os, yaml
from dataclasses import dataclass, field
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_FILE = ".riskreg.yml"

DEFAULT_CONFIG = {
    "extensions": [".go", ".py", ".js", ".jsx", ".ts", ".tsx", ".java", ".rb", ".cs"],
    "skip_dirs": [".git", "vendor", "node_modules", "__pycache__", ".venv", "dist", "build"],
    "exclude": [],
    "workers": 1,
}


@dataclass
class Config:
    data: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))

    @property
    def workers(self) -> int:
        try:
            return max(1, int(self.data.get("workers") or 1))
        except (TypeError, ValueError):
            return 1


def load_config(repo_root: str) -> Config:
    path = os.path.join(repo_root, CONFIG_FILE)
    merged = copy.deepcopy(DEFAULT_CONFIG)
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            try:
                user = yaml.safe_load(f) or {}
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                logger.warning("Ignoring malformed %s: %s", path, e)
                user = {}
        if not isinstance(user, dict):
            logger.warning("Ignoring %s: expected a mapping at top level", path)
            user = {}
        for k, v in user.items():
            if k not in merged:
                logger.warning("Unknown key %r in %s", k, path)
            elif _valid(merged[k], v):
                merged[k] = v
            else:
                logger.warning("Ignoring %r in %s: expected %s, got %r", k, path, type(merged[k]).__name__, v)
    return Config(merged)


def _valid(default: Any, value: Any) -> bool:
    if isinstance(default, list):
        return isinstance(value, list) and all(isinstance(x, str) for x in value)
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, type(default))
