# tests/utils/scripts.py
"""Write small bash trees for flattening tests."""

from pathlib import Path
from textwrap import dedent


def write_files(root: Path, files: dict[str, str]) -> dict[str, Path]:
    """Write `{relative path: text}` under root (text is dedented).

    Returns `{relative path: absolute Path}`.
    """
    written: dict[str, Path] = {}
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text), encoding="utf-8")
        written[rel] = path.resolve()
    return written
