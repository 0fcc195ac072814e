"""Rendering of end-of-run reports."""

from dataclasses import dataclass

from ..models import ImageIdentity
from ..utils.bytesize import pretty_bytes
from ..utils.log import lpad
from .dedup import DedupAnalyzer, HistoryChainStats, LayerChainStats
from .refresh import RunStats

PREFIX_WIDTH = 10
IMAGE_WIDTH = 70
SIZE_WIDTH = 20
TABLE_WIDTH = PREFIX_WIDTH + IMAGE_WIDTH + SIZE_WIDTH * 2


def percent(ratio: float) -> str:
    return f"{round(ratio * 1000) / 10}%"


@dataclass
class ImageRow:
    """One line of the report-only table."""

    index: int
    total: int
    identity: ImageIdentity
    virtual_bytes: int


class Reporter:
    """Formats run statistics as report lines."""

    def __init__(self, analyzer: DedupAnalyzer) -> None:
        self.analyzer = analyzer

    def run_stats_lines(self, stats: RunStats) -> list[str]:
        return [
            f"Images Refreshed: {stats.images_refreshed}",
            f"    added: {pretty_bytes(stats.bytes_added)}",
            f"  removed: {pretty_bytes(stats.bytes_removed)}",
            f"    delta: {pretty_bytes(stats.delta)}",
            "",
            f"Stable Virtual Disk: {pretty_bytes(stats.bytes_steady)}",
            f"Total Virtual Disk:  {pretty_bytes(stats.total_virtual)}",
            "",
        ]

    def layer_lines(self, layers: LayerChainStats) -> list[str]:
        return [
            f"Unique Base Images: {layers.unique_base_images}",
            lpad(f"Total layers    {layers.total_usages}", 22)
            + " "
            + lpad(f"Shared layers   {layers.shared_usages}", 22)
            + " "
            + f"Reused {percent(layers.reuse_ratio)}",
        ]

    def history_lines(self, history: HistoryChainStats) -> list[str]:
        return [
            lpad(f"Total commands  {history.total_usages}", 22)
            + " "
            + lpad(f"Shared commands {history.shared_usages}", 22)
            + " "
            + f"Reused {percent(history.reuse_ratio)}",
        ]

    def total_real_size_line(self) -> str:
        return f"Total Real Size:     {pretty_bytes(self.analyzer.total_real_bytes)}"

    def refresh_report(self, stats: RunStats, errors: list[str]) -> list[str]:
        """Report printed after a refresh run."""
        lines = ["", "Report:", "=" * 58, ""]
        lines += self.run_stats_lines(stats)
        lines += [self.total_real_size_line(), ""]
        lines += self.layer_lines(self.analyzer.layers)
        lines += self.history_lines(self.analyzer.history)
        if errors:
            lines += ["", f"Errors ({len(errors)}):"]
            lines += errors
        return lines

    def image_table(self, rows: list[ImageRow]) -> list[str]:
        """Table of images with their virtual size and reused bytes."""
        lines = [
            "",
            "REPORT:",
            "-" * TABLE_WIDTH,
            lpad("", PREFIX_WIDTH)
            + " "
            + lpad("Image", IMAGE_WIDTH)
            + " "
            + lpad("Virtual Size", SIZE_WIDTH)
            + " "
            + "Reuse",
            "-" * TABLE_WIDTH,
        ]
        for row in sorted(rows, key=lambda r: r.index):
            reused = self.analyzer.history.shared_bytes(row.identity)
            lines.append(
                lpad(f"[{row.index + 1}/{row.total}]", PREFIX_WIDTH)
                + " "
                + lpad(f"Refreshing {row.identity.slug}", IMAGE_WIDTH)
                + " "
                + lpad(pretty_bytes(row.virtual_bytes), SIZE_WIDTH)
                + " "
                + pretty_bytes(reused)
            )
        return lines

    def report_only(self, rows: list[ImageRow], errors: list[str]) -> list[str]:
        """Report printed after a report-only run."""
        lines = self.image_table(rows)
        lines += ["", "IMAGE STATS:", "-" * TABLE_WIDTH]
        lines += self.layer_lines(self.analyzer.layers)
        lines += self.history_lines(self.analyzer.history)
        lines += ["", "DISK STATS:", "-" * TABLE_WIDTH, self.total_real_size_line()]
        if errors:
            lines += ["", f"Errors ({len(errors)}):"]
            lines += errors
        return lines
