"""Processors for refresh and report-only runs."""

import logging

from ..exceptions import LocalStoreError
from ..reference import parse_reference
from ..stats.refresh import RunStats
from ..stats.report import ImageRow, Reporter
from ..utils.log import ItemLog, lpad, progress_prefix
from .context import RunContext
from .processor import ItemError, Processor
from .transaction import SyncTransaction

logger = logging.getLogger(__name__)


class RefreshProcessor(Processor[RunStats]):
    """Synchronizes each image with its registry and reports the totals."""

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self.reporter = Reporter(context.analyzer)

    async def process(self, slug: str, index: int, total: int) -> RunStats:
        prefix = progress_prefix(index, total)
        log = ItemLog(logger).partial(prefix + " " + lpad(f"Refreshing {slug}", 70) + " ")

        identity = parse_reference(slug)
        transaction = SyncTransaction(
            identity,
            self.context.registry,
            self.context.store,
            dry_run=self.context.config.dry_run,
            log=log,
            prefix=prefix,
        )
        result = await transaction.run()

        # An image that is still absent (dry run) has no layers or history
        if result.record is not None:
            try:
                history = await self.context.store.history(identity)
            except LocalStoreError as e:
                # The image itself is up to date; only the reuse analysis misses it
                logger.warning(f"{prefix} Could not read history of {identity}: {e}")
            else:
                self.context.analyzer.accumulate(identity, result.record, history)

        return result.stats

    def fulfilled(self, result: RunStats, index: int, total: int) -> None:
        self.context.stats.accumulate(result)

    def error(self, failure: ItemError, total: int) -> None:
        logger.error(f"{progress_prefix(failure.index, total)} {failure.error}")

    def complete(self, errors: list[ItemError]) -> None:
        lines = self.reporter.refresh_report(
            self.context.stats, [failure.message for failure in errors]
        )
        logger.info("\n".join(lines))


class ReportOnlyProcessor(Processor[ImageRow]):
    """Inspects local images only and reports their storage reuse."""

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self.reporter = Reporter(context.analyzer)
        self.rows: list[ImageRow] = []

    async def process(self, slug: str, index: int, total: int) -> ImageRow:
        identity = parse_reference(slug)
        record = await self.context.store.inspect(identity)
        if record is None:
            raise LocalStoreError(f"Image {identity} is not present locally")

        history = await self.context.store.history(identity)
        self.context.analyzer.accumulate(identity, record, history)
        return ImageRow(
            index=index, total=total, identity=identity, virtual_bytes=record.size_bytes
        )

    def fulfilled(self, result: ImageRow, index: int, total: int) -> None:
        self.rows.append(result)

    def error(self, failure: ItemError, total: int) -> None:
        logger.error(f"{progress_prefix(failure.index, total)} {failure.error}")

    def complete(self, errors: list[ItemError]) -> None:
        lines = self.reporter.report_only(self.rows, [failure.message for failure in errors])
        logger.info("\n".join(lines))
