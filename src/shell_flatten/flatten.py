# src/shell_flatten/flatten.py
"""The inlining driver: one pass over the main script, line by line.

Load-directives are replaced by the definitions of the library functions the
script needs (directly or through other needed functions); include-directives
are replaced by the file's contents. Everything else passes through.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from .extractor import extract_definition
from .locator import locate_functions, resolve_source_path
from .resolver import collect_dependencies
from .shell_parser import (
    LOAD_DIRECTIVE_RE,
    match_include_directive,
    match_load_directive,
    split_lines,
)
from .types import FlattenJob
from .utils import display_path, plural, read_source, write_script
from .utils_logs import GREEN, colorize, log

COMMENT_LINE_RE = re.compile(r"^\s*#")
TRAILING_COMMENT_RE = re.compile(r" # .*$")


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def usage_text(lines: Iterable[str]) -> str:
    """Return the script text used to decide which functions are called.

    Comment-only lines, trailing ` # ...` comments and load-directive lines
    are removed; the rest is searched by plain substring.
    """
    kept: list[str] = []
    for line in lines:
        if COMMENT_LINE_RE.match(line) or LOAD_DIRECTIVE_RE.match(line):
            continue
        kept.append(TRAILING_COMMENT_RE.sub("", line))
    return "\n".join(kept)


def squeeze_blank_lines(lines: Iterable[str]) -> Iterator[str]:
    """Collapse every run of empty lines into a single one."""
    previous_blank = False
    for line in lines:
        blank = line == ""
        if blank and previous_blank:
            continue
        previous_blank = blank
        yield line


def render(lines: Iterable[str]) -> str:
    text = "\n".join(lines)
    return f"{text}\n" if text else ""


# --------------------------------------------------------------------------- #
# driver
# --------------------------------------------------------------------------- #


class Flattener:
    """Flatten one main script.

    State lives for a single run:
      - registry:  function name → file holding its definition, accumulated
                   across load-directives (later loads overwrite).
      - needed:    names required by the directive being processed.
      - processed: names already emitted; a name is emitted at most once and
                   the first emitted definition wins.
    """

    def __init__(self, script: Path, *, cwd: Path | None = None) -> None:
        self.cwd = (cwd if cwd is not None else Path.cwd()).resolve()
        self.script = (self.cwd / script).resolve()
        self.registry: dict[str, Path] = {}
        self.needed: set[str] = set()
        self.processed: set[str] = set()
        self.emitted: list[str] = []
        self.sources: set[Path] = set()
        self._usage = ""

    def run(self) -> list[str]:
        """Return the flattened script as lines (no terminators)."""
        text = read_source(self.script, kind="main script")
        self.sources.add(self.script)
        lines = split_lines(text)
        self._usage = usage_text(lines)

        log("trace", f"[FLATTEN] {self.script} ({len(lines)} lines)")
        out: list[str] = []
        for lineno, line in enumerate(lines, 1):
            target = match_load_directive(line)
            if target is not None:
                log("debug", f"📚 line {lineno}: load {target}")
                out.extend(self._inline_library(target))
                continue

            target = match_include_directive(line)
            if target is not None:
                log("debug", f"📎 line {lineno}: include {target}")
                out.extend(self._include_file(target))
                continue

            out.append(line)

        return list(squeeze_blank_lines(out))

    def _resolve(self, target: str) -> Path:
        return resolve_source_path(
            target, cwd=self.cwd, fallback_dir=self.script.parent
        )

    def _inline_library(self, target: str) -> list[str]:
        library = self._resolve(target)
        located = locate_functions(library, cwd=self.cwd)
        self.registry.update(located)
        self.sources.add(library)
        self.sources.update(located.values())

        # Already-emitted names are walked again through the registry, so a
        # later redefinition's callees can be pulled in (over-inclusion).
        for name in sorted(self.registry):
            if name in self._usage:
                log("trace", f"[USAGE] {name} is used by the script")
                collect_dependencies(
                    name, self.registry[name], self.registry, self.needed
                )

        out: list[str] = []
        for name in sorted(self.needed):
            if name in self.processed:
                log("trace", f"[EMIT] {name} already emitted, skipping")
                continue
            definition = extract_definition(name, self.registry[name])
            self.processed.add(name)
            if not definition:
                continue
            log("debug", f"🧩 {name} ← {display_path(self.registry[name], self.cwd)}")
            out.extend(split_lines(definition))
            out.append("")
            self.emitted.append(name)

        self.needed.clear()
        return out

    def _include_file(self, target: str) -> list[str]:
        path = self._resolve(target)
        text = read_source(path, kind="include file")
        self.sources.add(path)
        return split_lines(text)


# --------------------------------------------------------------------------- #
# public API
# --------------------------------------------------------------------------- #


def flatten_script(script: Path | str, *, cwd: Path | None = None) -> str:
    """Return the flattened text of `script`."""
    return render(Flattener(Path(script), cwd=cwd).run())


def run_flatten(job: FlattenJob) -> Flattener:
    """Flatten `job["script"]` and write the result to its output."""
    cwd = job["cwd"]
    flattener = Flattener(job["script"], cwd=cwd)
    text = render(flattener.run())

    out = job.get("out")
    write_script(text, out)

    count = len(flattener.emitted)
    summary = f"{count} function{plural(count)} inlined"
    if out is None:
        log("debug", f"Flattened {display_path(flattener.script, cwd)} ({summary})")
    else:
        log(
            "info",
            colorize("✅ ", GREEN)
            + f"Flattened {display_path(flattener.script, cwd)}"
            f" → {display_path(out, cwd)} ({summary})",
        )
    return flattener
