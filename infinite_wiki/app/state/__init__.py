"""Per-view state controllers."""

from .miner import MinerController, MinerSnapshot, group_by_cluster
from .wiki import MODES, WikiController, WikiSnapshot
from .writer import WriterController, WriterSnapshot

__all__ = [
    "MODES",
    "MinerController",
    "MinerSnapshot",
    "WikiController",
    "WikiSnapshot",
    "WriterController",
    "WriterSnapshot",
    "group_by_cluster",
]
