# src/shell_flatten/types.py
from __future__ import annotations

from pathlib import Path
from typing import TypedDict

from typing_extensions import NotRequired


class Runtime(TypedDict):
    log_level: str
    use_color: bool
    # set while the flattened script itself is written to stdout
    log_to_stderr: bool


class FlattenJob(TypedDict):
    """One flatten run, with paths already resolved."""

    script: Path
    cwd: Path  # directive paths resolve here first
    out: NotRequired[Path]  # absent → stdout
