"""Command line entry point."""

import argparse
import asyncio
import logging
import sys

from .compose import DEFAULT_MANIFEST, load_references
from .core.registry_client import RegistryClient
from .core.types import SyncConfig, default_concurrency
from .exceptions import RegistrySyncError
from .store.base import ImageStore
from .store.docker import DockerImageStore
from .sync.context import RunContext
from .sync.processor import ItemError
from .sync.processors import RefreshProcessor, ReportOnlyProcessor
from .sync.scheduler import process_references

logger = logging.getLogger(__name__)


class UsageError(RegistrySyncError):
    """Raised for malformed command line arguments."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value of at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="registry-sync",
        description="Keep locally cached container images in sync with their registries.",
        add_help=False,
    )
    parser.add_argument(
        "manifests",
        nargs="*",
        help=f"Compose files listing the images to refresh (default: {DEFAULT_MANIFEST})",
    )
    parser.add_argument("--image", help="Refresh a single image reference instead of manifests")
    parser.add_argument(
        "--report-only",
        action="store_true",
        help="Only inspect local images and report storage reuse",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compare digests without tagging, pulling or removing images",
    )
    parser.add_argument(
        "--cpu-count",
        type=_positive_int,
        default=None,
        help=f"Number of images processed concurrently (default: {default_concurrency()})",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--help", action="store_true", help="Show this help and exit")
    return parser


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging once; later calls are no-ops."""
    if logging.getLogger().handlers:
        return
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def config_from_args(args: argparse.Namespace) -> SyncConfig:
    config = SyncConfig(dry_run=args.dry_run, report_only=args.report_only)
    if args.cpu_count is not None:
        config.concurrency = args.cpu_count
    return config


async def resolve_references(args: argparse.Namespace) -> list[str]:
    if args.image:
        return [args.image]
    return await load_references(args.manifests or [DEFAULT_MANIFEST])


async def run_sync(
    config: SyncConfig,
    references: list[str],
    store: ImageStore | None = None,
    registry: RegistryClient | None = None,
) -> list[ItemError]:
    """Synchronize (or only report on) a list of image references.

    Args:
        config: Run configuration
        references: Image references to process
        store: Local image store; the docker CLI by default
        registry: Registry client; created from ``config`` by default

    Returns:
        Per-image failures
    """
    store = store or DockerImageStore(config.docker_binary)
    async with registry or RegistryClient(config) as client:
        context = RunContext(config=config, registry=client, store=store)
        if config.report_only:
            processor = ReportOnlyProcessor(context)
        else:
            processor = RefreshProcessor(context)
        return await process_references(references, processor, config.concurrency)


async def _main(args: argparse.Namespace) -> list[ItemError]:
    config = config_from_args(args)
    references = await resolve_references(args)
    logger.info(f"Processing {len(references)} images with concurrency {config.concurrency}")
    return await run_sync(config, references)


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool.

    Returns:
        Exit code: 1 for help or startup errors, 0 otherwise, including runs
        in which individual images failed
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 1

    if args.help:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    try:
        errors = asyncio.run(_main(args))
    except (RegistrySyncError, ValueError, OSError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    if errors:
        logger.info(f"{len(errors)} images failed.")
    return 0


def run() -> None:
    sys.exit(main())
