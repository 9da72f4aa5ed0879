# src/shell_flatten/utils.py

import sys
from contextlib import suppress
from pathlib import Path
from typing import TextIO, cast

from .constants import DEFAULT_ENCODING, DEFAULT_ENCODING_ERRORS


def should_use_color() -> bool:
    """Color log tags only when diagnostics land on a terminal."""
    return sys.stderr.isatty()


def read_source(path: Path, *, kind: str = "file") -> str:
    """Read a script or library as text, keeping undecodable bytes intact.

    `kind` only flavors the error message ("main script", "library", ...).
    """
    if not path.exists():
        xmsg = f"Cannot read {kind}: {path} (file not found)"
        raise FileNotFoundError(xmsg)
    if not path.is_file():
        xmsg = f"Cannot read {kind}: {path} (not a regular file)"
        raise ValueError(xmsg)
    try:
        return path.read_text(encoding=DEFAULT_ENCODING, errors=DEFAULT_ENCODING_ERRORS)
    except OSError as e:
        xmsg = f"Cannot read {kind}: {path} ({e.strerror or e})"
        raise RuntimeError(xmsg) from e


def write_script(text: str, out: Path | None = None) -> None:
    """Write flattened text to `out`, or to stdout when `out` is None.

    The text is encoded back with surrogateescape, so bytes that were not
    valid UTF-8 in the sources come out exactly as they went in.
    """
    data = text.encode(DEFAULT_ENCODING, errors=DEFAULT_ENCODING_ERRORS)
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
        return

    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        # a text-only replacement stream (e.g. io.StringIO)
        sys.stdout.write(data.decode(DEFAULT_ENCODING, errors=DEFAULT_ENCODING_ERRORS))
    else:
        buffer.write(data)
        buffer.flush()


def display_path(path: Path, root: Path | None = None) -> str:
    """Return `path` relative to `root` (default: cwd) when possible."""
    base = root if root is not None else Path.cwd()
    try:
        return str(path.relative_to(base))
    except ValueError:
        return str(path)


def plural(count: int) -> str:
    return "" if count == 1 else "s"


def safe_log(msg: str) -> None:
    """Report `msg` on the real stderr, even when logging itself is broken."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(Exception):
        stream.write(f"{msg}\n")
        stream.flush()
