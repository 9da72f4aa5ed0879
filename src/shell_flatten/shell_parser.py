# src/shell_flatten/shell_parser.py
"""Lightweight text scanner for bash sources.

Only what the flattener needs is recognised: load-directives, include
directives, function headers with brace bodies, and balanced braces.
Nothing here executes or evaluates shell code.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# patterns
# --------------------------------------------------------------------------- #

# Letters, digits and underscore; anything else ends a name.
NAME_CHARS = "A-Za-z0-9_"
NAME_TOKEN_RE = re.compile(f"[{NAME_CHARS}]+")

LOAD_DIRECTIVE_RE = re.compile(r"^(?:\.|source) (?P<path>.*)$")
INCLUDE_DIRECTIVE_RE = re.compile(r"^###include:(?P<path>.*)$", re.IGNORECASE)

# `name()`, `name ()`, `function name`, `function name()`
_HEADER_TMPL = (
    r"[ \t]*(?:"
    r"function[ \t]+(?P<kw_name>{name})(?:[ \t]*\([ \t]*\))?"
    r"|(?P<name>{name})[ \t]*\([ \t]*\)"
    r")"
)
FUNCTION_HEADER_RE = re.compile(_HEADER_TMPL.format(name=f"[{NAME_CHARS}]+"))

# Whitespace allowed between a header and its opening brace
_BODY_GAP_RE = re.compile(r"\s*")


# --------------------------------------------------------------------------- #
# types
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class FunctionSpan:
    """A function definition found in a source text."""

    name: str
    start: int  # offset of the header line's first character
    end: int  # offset just past the closing brace's line (newline excluded)
    text: str


@dataclass(frozen=True)
class LoadDirective:
    """A top-level `. path` / `source path` line."""

    target: str
    lineno: int


# --------------------------------------------------------------------------- #
# directives
# --------------------------------------------------------------------------- #


def _clean_target(raw: str) -> str:
    target = raw.strip()
    if len(target) >= 2 and target[0] == target[-1] and target[0] in "\"'":  # noqa: PLR2004
        target = target[1:-1]
    return target


def match_load_directive(line: str) -> str | None:
    """Return the target path if `line` is a load-directive."""
    match = LOAD_DIRECTIVE_RE.match(line)
    if not match:
        return None
    target = _clean_target(match.group("path"))
    return target or None


def match_include_directive(line: str) -> str | None:
    """Return the target path if `line` is an include-directive."""
    match = INCLUDE_DIRECTIVE_RE.match(line)
    if not match:
        return None
    target = match.group("path").strip()
    return target or None


# --------------------------------------------------------------------------- #
# braces and function spans
# --------------------------------------------------------------------------- #


def find_matching_brace(text: str, open_index: int) -> int:
    """Return the index of the `}` closing the `{` at `open_index`, or -1."""
    depth = 0
    for i in range(open_index, len(text)):
        char = text[i]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _line_end(text: str, index: int) -> int:
    end = text.find("\n", index)
    return len(text) if end < 0 else end


def _body_open_index(text: str, header_end: int) -> int | None:
    gap = _BODY_GAP_RE.match(text, header_end)
    pos = gap.end() if gap else header_end
    if pos < len(text) and text[pos] == "{":
        return pos
    return None


def _span_from_header(
    text: str, header: re.Match[str], line_start: int
) -> FunctionSpan | None:
    """Build a span for `header`, or None when it has no brace body.

    Raises ValueError when the body never closes.
    """
    open_index = _body_open_index(text, header.end())
    if open_index is None:
        return None
    close_index = find_matching_brace(text, open_index)
    name = header.group("kw_name") or header.group("name")
    if close_index < 0:
        lineno = text.count("\n", 0, line_start) + 1
        xmsg = f"Unbalanced braces in function {name!r} (line {lineno})"
        raise ValueError(xmsg)
    end = _line_end(text, close_index)
    return FunctionSpan(name=name, start=line_start, end=end, text=text[line_start:end])


def scan_library(text: str) -> Iterator[FunctionSpan | LoadDirective]:
    """Yield the top-level functions and load-directives of a library, in order.

    Function bodies are skipped as a whole, so functions or directives nested
    inside another function are not reported.
    """
    pos = 0
    size = len(text)
    while pos < size:
        end = _line_end(text, pos)
        header = FUNCTION_HEADER_RE.match(text, pos, end)
        span = _span_from_header(text, header, pos) if header else None
        if span is not None:
            yield span
            pos = span.end + 1
            continue

        target = match_load_directive(text[pos:end])
        if target is not None:
            yield LoadDirective(target=target, lineno=text.count("\n", 0, pos) + 1)
        pos = end + 1


def find_function(text: str, name: str) -> FunctionSpan | None:
    """Return the first definition of `name` in `text` with a balanced body."""
    header_re = re.compile(
        r"^" + _HEADER_TMPL.format(name=re.escape(name)) + r"(?![" + NAME_CHARS + r"])",
        re.MULTILINE,
    )
    for header in header_re.finditer(text):
        try:
            span = _span_from_header(text, header, header.start())
        except ValueError:
            return None
        if span is not None:
            return span
    return None


# --------------------------------------------------------------------------- #
# text helpers
# --------------------------------------------------------------------------- #


def name_tokens(text: str) -> set[str]:
    """Return the distinct name-alphabet tokens occurring in `text`."""
    return set(NAME_TOKEN_RE.findall(text))


def split_lines(text: str) -> list[str]:
    """Split text into lines without terminators; a final newline adds no line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines
