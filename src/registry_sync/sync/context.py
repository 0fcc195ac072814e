"""Run-scoped state shared by every item of a run."""

from dataclasses import dataclass, field

from ..core.registry_client import RegistryClient
from ..core.types import SyncConfig
from ..stats.dedup import DedupAnalyzer
from ..stats.refresh import RunStats
from ..store.base import ImageStore


@dataclass
class RunContext:
    """Configuration, collaborators and accumulators of one run.

    The registry client carries the auth endpoint memo and credential cache;
    the analyzer and stats accumulate results of all items.
    """

    config: SyncConfig
    registry: RegistryClient
    store: ImageStore
    analyzer: DedupAnalyzer = field(default_factory=DedupAnalyzer)
    stats: RunStats = field(default_factory=RunStats)
