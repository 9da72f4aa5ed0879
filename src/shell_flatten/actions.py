# src/shell_flatten/actions.py
import re
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable
from contextlib import suppress
from pathlib import Path

from .constants import DEFAULT_ENCODING, DEFAULT_WATCH_INTERVAL
from .flatten import Flattener, render
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .utils_logs import get_logger


def _snapshot_mtimes(files: set[Path]) -> dict[Path, float]:
    return {f: f.stat().st_mtime for f in files if f.exists()}


def watch_for_changes(
    rebuild: Callable[[], set[Path]],
    *,
    script: Path,
    out: Path | None = None,
    interval: float = DEFAULT_WATCH_INTERVAL,
) -> None:
    """Poll file modification times and re-flatten when changes are detected.

    `rebuild` flattens once and returns the files it read (main script,
    libraries, include files). That set is what gets watched, so a library
    added to the script is picked up on the next round. `script` is always
    watched and `out` never is. Stops on KeyboardInterrupt.
    """
    logger = get_logger()
    logger.info(
        "👀 Watching for changes (interval=%.2fs)... Press Ctrl+C to stop.", interval
    )

    ignored: set[Path] = {out.resolve()} if out is not None else set()

    def _rebuild(previous: set[Path]) -> set[Path]:
        try:
            sources = rebuild()
        except (FileNotFoundError, ValueError, RuntimeError) as e:
            # keep watching; the next save may fix it
            logger.error("%s", e)  # noqa: TRY400
            sources = previous
        return (sources | {script}) - ignored

    watched = _rebuild(set())
    mtimes = _snapshot_mtimes(watched)
    logger.trace("[WATCH] initial files: %s", sorted(str(f) for f in watched))

    try:
        while True:
            time.sleep(interval)

            changed: list[Path] = []
            for f in sorted(watched):
                old_m = mtimes.get(f)
                if not f.exists():
                    if old_m is not None:
                        changed.append(f)
                        mtimes.pop(f, None)
                    continue
                new_m = f.stat().st_mtime
                if old_m is None or new_m > old_m:
                    changed.append(f)
                    mtimes[f] = new_m

            if changed:
                logger.info(
                    "\n🔁 Detected %d modified file(s). Re-flattening...", len(changed)
                )
                watched = _rebuild(watched)
                mtimes = _snapshot_mtimes(watched)
    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool.

    Reads the version from pyproject.toml and the commit from git;
    either falls back to "unknown".
    """
    logger = get_logger()
    version = "unknown"
    commit = "unknown"

    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding=DEFAULT_ENCODING)
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    with suppress(Exception):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or "unknown"

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)


_SELFTEST_LIBRARY = """\
greet() {
  # say hello through the helper
  helper "hello"
}

helper() {
  printf '%s\\n' "$1"
}

unused() { echo "never inlined"; }
"""

_SELFTEST_SCRIPT = """\
#!/bin/bash
. {library}
greet
"""


def run_selftest() -> bool:
    """Run a lightweight functional test of the tool itself."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        library = tmp_dir / "lib.sh"
        library.write_text(_SELFTEST_LIBRARY, encoding=DEFAULT_ENCODING)
        script = tmp_dir / "main.sh"
        script.write_text(
            _SELFTEST_SCRIPT.replace("{library}", str(library)),
            encoding=DEFAULT_ENCODING,
        )

        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        flattener = Flattener(script, cwd=tmp_dir)
        text = render(flattener.run())

        ok = (
            flattener.emitted == ["greet", "helper"]
            and "# say hello through the helper" in text
            and "unused" not in text
            and ". " not in text.splitlines()[1]
        )
        if ok:
            logger.info(
                "✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        logger.error("Self-test failed: unexpected output:\n%s", text)
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        # unexpected bug: show the traceback
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
