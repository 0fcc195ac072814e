"""Tests for hash chain deduplication analysis."""

from registry_sync.models import HistoryEntry
from registry_sync.reference import parse_reference
from registry_sync.stats.dedup import DedupAnalyzer, HistoryChainStats, LayerChainStats
from registry_sync.utils.digest import chain_digest
from tests.helpers import history, record

BASE = [("ADD rootfs", "5MB"), ("RUN apt-get update", "20MB"), ("ENV LANG=C", "0B")]


def test_history_chains_share_common_prefix():
    """Two images sharing their first 3 of 5 build steps."""
    stats = HistoryChainStats()
    app = parse_reference("acme/app:1")
    worker = parse_reference("acme/worker:1")

    stats.accumulate(app, history(*BASE, ("COPY app /app", "1MB"), ("CMD app", "0B")))
    stats.accumulate(worker, history(*BASE, ("COPY worker /w", "2MB"), ("CMD worker", "0B")))

    assert stats.shared_links == 3
    assert stats.shared_usages == 6
    assert stats.total_usages == 10
    assert stats.reuse_ratio == 0.6
    # Shared steps are counted once: 5MB + 20MB + 0B + 1MB + 2MB
    assert stats.total_bytes == 28_000_000
    assert stats.shared_bytes(app) == 25_000_000
    assert stats.image_hashes["acme/app:1"][:3] == stats.image_hashes["acme/worker:1"][:3]
    assert stats.image_hashes["acme/app:1"][3] != stats.image_hashes["acme/worker:1"][3]


def test_same_step_after_different_base_is_not_shared():
    stats = HistoryChainStats()
    stats.accumulate(parse_reference("a"), history(("FROM alpine", "5MB"), ("RUN make", "1MB")))
    stats.accumulate(parse_reference("b"), history(("FROM debian", "50MB"), ("RUN make", "1MB")))
    assert stats.shared_links == 0
    assert stats.reuse_ratio == 0.0
    assert len(stats.roots) == 2


def test_history_link_hash_covers_all_fields():
    entry = HistoryEntry(created_by="RUN x", created_at="2024-01-01", size="1MB")
    stats = HistoryChainStats()
    (link,) = stats.accumulate(parse_reference("a"), [entry])
    assert link == chain_digest("", "RUN x", "2024-01-01", "1MB")


def test_accumulating_same_image_twice_does_not_count_as_shared():
    stats = HistoryChainStats()
    identity = parse_reference("a")
    stats.accumulate(identity, history(*BASE))
    stats.accumulate(identity, history(*BASE))
    assert stats.shared_links == 0
    assert stats.total_bytes == 25_000_000


def test_layer_chains_and_base_images():
    stats = LayerChainStats()
    stats.accumulate(parse_reference("a"), ["sha256:base", "sha256:a1"])
    stats.accumulate(parse_reference("b"), ["sha256:base", "sha256:b1", "sha256:b2"])
    stats.accumulate(parse_reference("c"), ["sha256:other"])

    assert stats.unique_base_images == 2
    assert stats.shared_links == 1
    assert stats.shared_usages == 2
    assert stats.total_usages == 6


def test_empty_stats():
    stats = LayerChainStats()
    assert stats.reuse_ratio == 0.0
    assert stats.unique_base_images == 0


def test_analyzer_combines_layers_and_history():
    analyzer = DedupAnalyzer()
    identity = parse_reference("acme/app:1")
    analyzer.accumulate(identity, record("d", 10, ["sha256:l1"]), history(*BASE))
    analyzer.accumulate(parse_reference("acme/app:2"), None, history(*BASE))

    assert analyzer.layers.total_usages == 1
    assert analyzer.history.shared_links == 3
    assert analyzer.total_real_bytes == 25_000_000
