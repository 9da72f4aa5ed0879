# src/shell_flatten/locator.py
"""Discover which functions a library defines, and where."""

from __future__ import annotations

from pathlib import Path

from .shell_parser import FunctionSpan, LoadDirective, scan_library
from .utils import display_path, read_source
from .utils_logs import log


def resolve_source_path(
    raw: str,
    *,
    cwd: Path,
    fallback_dir: Path | None = None,
) -> Path:
    """Resolve a directive target the way the shell would, with one fallback.

    Relative targets are looked up from `cwd` first (bash resolves them
    against the working directory), then from `fallback_dir`, usually the
    directory of the file holding the directive.
    """
    path = Path(raw).expanduser()
    if path.is_absolute():
        return path

    primary = (cwd / path).resolve()
    if primary.exists() or fallback_dir is None:
        return primary

    fallback = (fallback_dir / path).resolve()
    if fallback.exists():
        log("trace", f"[RESOLVE] {raw!r} not under cwd, using {fallback}")
        return fallback
    return primary


def locate_functions(library: Path, *, cwd: Path | None = None) -> dict[str, Path]:
    """Return `{function name: file holding its definition}` for a library.

    Nested load-directives are followed in place, so a function redefined
    later in the load order maps to its last definition. Raises
    FileNotFoundError for a missing file, ValueError for a function body
    whose braces never close, and RuntimeError for a circular load chain.
    """
    base = cwd if cwd is not None else Path.cwd()
    found: dict[str, Path] = {}
    _locate_into(library.resolve(), found, cwd=base, stack=())
    log(
        "debug",
        f"🔎 {display_path(library, base)}: {len(found)} function(s) located",
    )
    return found


def _locate_into(
    library: Path,
    found: dict[str, Path],
    *,
    cwd: Path,
    stack: tuple[Path, ...],
) -> None:
    if library in stack:
        chain = " → ".join(str(p) for p in (*stack, library))
        xmsg = f"Circular library load: {chain}"
        raise RuntimeError(xmsg)

    text = read_source(library, kind="library")
    try:
        items = list(scan_library(text))
    except ValueError as e:
        xmsg = f"Cannot load library {library}: {e}"
        raise ValueError(xmsg) from e

    for item in items:
        if isinstance(item, FunctionSpan):
            log("trace", f"[LOCATE] {item.name} → {library}")
            found[item.name] = library
        elif isinstance(item, LoadDirective):
            nested = resolve_source_path(
                item.target, cwd=cwd, fallback_dir=library.parent
            )
            log(
                "trace",
                f"[LOCATE] {library.name}:{item.lineno} loads {item.target!r}"
                f" → {nested}",
            )
            if not nested.exists():
                xmsg = (
                    f"Cannot load library {library}: line {item.lineno} loads"
                    f" {item.target!r}, which does not exist"
                )
                raise FileNotFoundError(xmsg)
            _locate_into(nested, found, cwd=cwd, stack=(*stack, library))
