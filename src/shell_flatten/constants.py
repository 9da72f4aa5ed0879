# src/shell_flatten/constants.py
"""
Central constants used across the project.
"""

DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds

# every file is read and written this way so arbitrary bytes survive
DEFAULT_ENCODING: str = "utf-8"
DEFAULT_ENCODING_ERRORS: str = "surrogateescape"

# difflib ratio for "did you mean" option hints
DEFAULT_HINT_CUTOFF: float = 0.6
