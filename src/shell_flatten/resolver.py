# src/shell_flatten/resolver.py
"""Call-graph edges and transitive closure over function definitions."""

from collections.abc import Mapping
from pathlib import Path

from .extractor import extract_definition
from .shell_parser import name_tokens
from .utils_logs import log


def referenced_functions(
    name: str,
    definition: str,
    registry: Mapping[str, Path],
) -> list[str]:
    """Return the defined functions that `definition` refers to, sorted.

    Every run of name characters is a candidate; the function's own name is
    dropped so recursion and self-mentions never count as a dependency. A
    candidate survives only if the registry knows a function by that name.
    Words in strings or comments can still match, which over-includes.
    """
    candidates = name_tokens(definition)
    candidates.discard(name)
    return sorted(token for token in candidates if token in registry)


def collect_dependencies(
    seed: str,
    location: Path,
    registry: Mapping[str, Path],
    needed: set[str],
) -> set[str]:
    """Add `seed` and everything it transitively calls to `needed`.

    Names already in `needed` are not descended again, which also breaks
    cycles. Returns `needed` for convenience.
    """
    needed.add(seed)
    definition = extract_definition(seed, location)
    if not definition:
        return needed

    for dep in referenced_functions(seed, definition, registry):
        if dep in needed:
            continue
        log("trace", f"[DEPS] {seed} → {dep}")
        collect_dependencies(dep, registry[dep], registry, needed)
    return needed
