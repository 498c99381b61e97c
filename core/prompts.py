"""Runtime path resolution and markdown prompt rendering."""

from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from pathlib import Path

from .constants import PROJECT_ROOT
from .logging_setup import log

_INCLUDE_RE = re.compile(r"\{\{([^}]+\.md)\}\}")
_VARIABLE_RE = re.compile(r"\{\{(datetime)\}\}", re.IGNORECASE)


def runtime_root() -> Path:
    """Return POPEBOT_HOME if set, else the project root."""
    runtime_home = os.getenv("POPEBOT_HOME", "").strip()
    return Path(runtime_home).expanduser().resolve() if runtime_home else PROJECT_ROOT


def resolve_runtime_path(path_value: str | Path) -> Path:
    """Resolve configured paths relative to POPEBOT_HOME or project root."""
    path = Path(path_value).expanduser()
    if not path.is_absolute():
        path = runtime_root() / path
    return path.resolve()


def resolve_variables(content: str) -> str:
    """Resolve built-in variables like {{datetime}}."""

    def _sub(m: re.Match) -> str:
        if m.group(1).lower() == "datetime":
            return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return m.group(0)

    return _VARIABLE_RE.sub(_sub, content)


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def render_md(file_path: str | Path, chain: tuple[Path, ...] = (), root: Path | None = None) -> str:
    """Render a markdown file, resolving {{path.md}} includes recursively.

    Include paths resolve relative to the runtime root. A missing include
    leaves its token untouched; a missing top-level file or a circular
    include renders as an empty string. {{datetime}} is resolved on every
    call so prompts always carry the current time.
    """
    base = root or runtime_root()
    resolved = Path(file_path).expanduser().resolve()

    if resolved in chain:
        cycle = " -> ".join(_display(p, base) for p in (*chain, resolved))
        log.warning(f"Circular include detected: {cycle}")
        return ""

    if not resolved.is_file():
        return ""

    content = resolved.read_text(encoding="utf-8")
    current_chain = (*chain, resolved)

    def _include(m: re.Match) -> str:
        include_path = (base / m.group(1).strip()).resolve()
        if not include_path.is_file():
            return m.group(0)
        return render_md(include_path, current_chain, base)

    with_includes = _INCLUDE_RE.sub(_include, content)
    return resolve_variables(with_includes)
