# tests/utils/__init__.py

from .force_mtime_advance import force_mtime_advance
from .jobs import make_job
from .scripts import write_files
from .trace import TRACE, make_trace

__all__ = [
    "TRACE",
    "force_mtime_advance",
    "make_job",
    "make_trace",
    "write_files",
]
