# src/shell_flatten/cli.py
"""Command line entry point: `shell-flatten SCRIPT [-o OUT] [--watch]`."""

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest, watch_for_changes
from .constants import DEFAULT_HINT_CUTOFF, DEFAULT_WATCH_INTERVAL
from .flatten import run_flatten
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .runtime import current_runtime
from .types import FlattenJob
from .utils import safe_log
from .utils_logs import LEVEL_ORDER, get_logger, set_log_level

# errors that end a run with a message and exit 1, no traceback
USER_ERRORS = (FileNotFoundError, ValueError, TypeError, RuntimeError)


class HintingArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that suggests the closest option for a mistyped flag."""

    def option_hints(self, message: str) -> list[str]:
        marker = "unrecognized arguments:"
        if marker not in message:
            return []
        known = [opt for action in self._actions for opt in action.option_strings]
        hints: list[str] = []
        for token in message.split(marker, 1)[1].split():
            if not token.startswith("-"):
                continue
            close = get_close_matches(token, known, n=1, cutoff=DEFAULT_HINT_CUTOFF)
            if close:
                hints.append(f"Hint: did you mean {close[0]}?")
        return hints

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        lines = [f"{self.prog}: error: {message}", *self.option_hints(message)]
        self.exit(2, "\n".join(lines) + "\n")


def _build_parser() -> HintingArgumentParser:
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    parser.add_argument(
        "script",
        nargs="?",
        type=Path,
        metavar="SCRIPT",
        help="Main bash script to flatten.",
    )
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        help="Write the flattened script to this file (default: stdout).",
    )
    parser.add_argument(
        "--watch",
        nargs="?",
        type=float,
        const=DEFAULT_WATCH_INTERVAL,
        metavar="SECONDS",
        help=(
            "Keep running and re-flatten whenever the script, a library or an"
            f" include file changes (poll every SECONDS, default {DEFAULT_WATCH_INTERVAL})."
        ),
    )

    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Always color log tags.",
    )
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Never color log tags (default: color when stderr is a terminal).",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q",
        "--quiet",
        dest="log_level",
        action="store_const",
        const="warning",
        help="Only report warnings and errors.",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        dest="log_level",
        action="store_const",
        const="debug",
        help="Report every directive and inlined function.",
    )
    verbosity.add_argument(
        "--log-level",
        dest="log_level",
        choices=LEVEL_ORDER,
        help="Set the log level explicitly.",
    )

    parser.add_argument(
        "--version", action="store_true", help="Print version and commit, then exit."
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Flatten a small built-in example and check the result.",
    )
    return parser


def _apply_runtime(args: argparse.Namespace) -> None:
    if args.use_color is not None:
        current_runtime["use_color"] = args.use_color
    if args.log_level is not None:
        set_log_level(args.log_level)
    # stdout carries the flattened script unless it goes to a file
    current_runtime["log_to_stderr"] = args.script is not None and args.out is None


def _make_job(args: argparse.Namespace) -> FlattenJob:
    cwd = Path.cwd().resolve()
    job: FlattenJob = {"script": args.script, "cwd": cwd}
    if args.out is not None:
        job["out"] = (cwd / args.out).resolve()
    return job


def _flatten(job: FlattenJob, watch: float | None) -> None:
    if watch is None:
        run_flatten(job)
        return

    def rebuild() -> set[Path]:
        return run_flatten(job).sources

    watch_for_changes(
        rebuild,
        script=(job["cwd"] / job["script"]).resolve(),
        out=job.get("out"),
        interval=watch,
    )


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _apply_runtime(args)
        logger.trace(
            "[BOOT] Python %s (%s), argv=%r",
            platform.python_version(),
            platform.python_implementation(),
            argv if argv is not None else sys.argv[1:],
        )

        if args.version:
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0
        if args.selftest:
            return 0 if run_selftest() else 1
        if args.script is None:
            parser.error("the following arguments are required: SCRIPT")

        _flatten(_make_job(args), args.watch)

    except USER_ERRORS as e:
        try:
            logger.error("%s", e)  # noqa: TRY400
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        try:
            logger.critical("Unexpected internal error: %s", e, exc_info=True)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    return 0
