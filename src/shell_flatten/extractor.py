# src/shell_flatten/extractor.py
"""Pull a function's verbatim definition out of its source file."""

from pathlib import Path

from .shell_parser import find_function
from .utils import read_source
from .utils_logs import log


def extract_definition(name: str, defining_file: Path) -> str:
    """Return the full text of `name`'s first definition in `defining_file`.

    The span runs from the start of the header line to the end of the line
    holding the matching closing brace, comments and nesting included.
    Returns "" when no brace-delimited definition is found.
    """
    text = read_source(defining_file, kind="library")
    span = find_function(text, name)
    if span is None:
        log("debug", f"⚠️ No definition of {name!r} found in {defining_file}")
        return ""

    log(
        "trace",
        f"[EXTRACT] {name} ← {defining_file.name}"
        f" [{span.start}:{span.end}] ({span.text.count(chr(10)) + 1} line(s))",
    )
    return span.text
