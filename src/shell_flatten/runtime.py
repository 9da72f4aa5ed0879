# src/shell_flatten/runtime.py
"""Live runtime flags shared across modules, set from the command line."""

from .constants import DEFAULT_LOG_LEVEL
from .types import Runtime
from .utils import should_use_color

current_runtime: Runtime = {
    "log_level": DEFAULT_LOG_LEVEL,
    "use_color": should_use_color(),
    "log_to_stderr": False,
}
