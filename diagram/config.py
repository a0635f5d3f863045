from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv  # type: ignore

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


# association inference
MERGE_ROLES = _env_bool("DIAGRAM_MERGE_ROLES", False)
MAX_ROLES = _env_int("DIAGRAM_MAX_ROLES", -1)  # -1 = unbounded

# strict: malformed @assoc values / doc comments raise instead of warning
STRICT_ANNOTATIONS = _env_bool("DIAGRAM_STRICT_ANNOTATIONS", True)

LOG_LEVEL = os.getenv("DIAGRAM_LOG_LEVEL", "INFO").upper()

GRAPHVIZ_DPI = 72


@dataclass
class PipelineConfig:
    merge: bool = MERGE_ROLES
    max_roles: int = MAX_ROLES
    strict: bool = STRICT_ANNOTATIONS
    associations: bool = True
    accessors: bool = True
    important: bool = True
