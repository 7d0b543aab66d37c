"""ZK Env: filter Zettelkasten notes into environments and measure their link graph."""

from zk_env.models import Note, NoteIndex, NoteEnvStatistics, EnvironmentStatistics
from zk_env.filter import Filter, FilterMode, tag_closure
from zk_env.statistics import compute_environment_statistics

__all__ = [
    "Note",
    "NoteIndex",
    "NoteEnvStatistics",
    "EnvironmentStatistics",
    "Filter",
    "FilterMode",
    "tag_closure",
    "compute_environment_statistics",
]

__version__ = "0.1.0"
