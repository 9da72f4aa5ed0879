# src/shell_flatten/meta.py

"""Centralized program identity constants for Shell Flatten."""

from typing import NamedTuple

_BASE = "shell-flatten"

# CLI script name (the executable or console entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Short tagline or description for help screens and metadata
DESCRIPTION = "Inline only the bash library functions your script actually uses."

class Metadata(NamedTuple):
    version: str
    commit: str
