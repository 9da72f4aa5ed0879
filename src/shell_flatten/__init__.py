# src/shell_flatten/__init__.py

"""Shell Flatten: inline only the bash library functions your script uses.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()                 → CLI entrypoint
    - flatten_script()       → Flatten one script, return the text
    - Flattener              → The line-by-line inlining driver
    - locate_functions()     → Which functions a library defines, and where
    - collect_dependencies() → Transitive closure of a function's calls
"""

from .actions import (
    get_metadata,
    run_selftest,
    watch_for_changes,
)
from .cli import (
    main,
)
from .constants import (
    DEFAULT_ENCODING,
    DEFAULT_ENCODING_ERRORS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_WATCH_INTERVAL,
)
from .extractor import extract_definition
from .flatten import (
    Flattener,
    flatten_script,
    run_flatten,
    squeeze_blank_lines,
    usage_text,
)
from .locator import locate_functions, resolve_source_path
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .resolver import collect_dependencies, referenced_functions
from .runtime import current_runtime
from .shell_parser import (
    FunctionSpan,
    LoadDirective,
    find_function,
    find_matching_brace,
    match_include_directive,
    match_load_directive,
    scan_library,
)
from .types import FlattenJob, Runtime
from .utils import (
    read_source,
    should_use_color,
    write_script,
)
from .utils_logs import (
    LEVEL_ORDER,
    RESET,
    colorize,
    get_logger,
    log,
    set_log_level,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",  # version info
    "main",
    "run_selftest",
    "watch_for_changes",
    #
    # --- Flatten Engine ---
    "collect_dependencies",
    "extract_definition",
    "Flattener",
    "flatten_script",
    "locate_functions",
    "referenced_functions",
    "resolve_source_path",
    "run_flatten",
    "squeeze_blank_lines",
    "usage_text",
    #
    # --- Shell Scanning ---
    "find_function",
    "find_matching_brace",
    "FunctionSpan",
    "LoadDirective",
    "match_include_directive",
    "match_load_directive",
    "scan_library",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_ENCODING",
    "DEFAULT_ENCODING_ERRORS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_WATCH_INTERVAL",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "RESET",
    "colorize",
    "get_logger",
    "log",
    "read_source",
    "set_log_level",
    "should_use_color",
    "write_script",
    #
    # --- Types ---
    "FlattenJob",
    "Runtime",
]
