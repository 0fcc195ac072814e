"""Run statistics, deduplication analysis and reporting."""

from .dedup import ChainStats, DedupAnalyzer, HistoryChainStats, LayerChainStats
from .refresh import RunStats
from .report import ImageRow, Reporter

__all__ = [
    "ChainStats",
    "DedupAnalyzer",
    "HistoryChainStats",
    "ImageRow",
    "LayerChainStats",
    "Reporter",
    "RunStats",
]
