"""Image store backed by the docker command line client."""

import asyncio
import json
import logging
import os
from typing import Any

from ..exceptions import LocalStoreError
from ..models import DigestRecord, HistoryEntry, ImageIdentity
from .base import ImageStore

logger = logging.getLogger(__name__)

# stderr fragments docker prints when an image does not exist locally
MISSING_IMAGE_MARKERS = ("No such image", "No such object")


def parse_inspect(output: str) -> DigestRecord:
    """Parse ``docker image inspect --format '{{json .}}'`` output.

    Raises:
        LocalStoreError: If the output is not a JSON object
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise LocalStoreError(f"Invalid inspect output: {e}") from e

    # Without --format, inspect prints a list of objects
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise LocalStoreError("Invalid inspect output: expected an object")

    rootfs = data.get("RootFS") or {}
    return DigestRecord(
        repo_digests=list(data.get("RepoDigests") or []),
        root_layers=list(rootfs.get("Layers") or []),
        size_bytes=int(data.get("Size") or 0),
    )


def parse_history(output: str) -> list[HistoryEntry]:
    """Parse ``docker history --format '{{json .}}'`` output.

    Docker prints one JSON object per line, newest first; the entries are
    returned oldest first.

    Raises:
        LocalStoreError: If a line is not valid JSON
    """
    entries = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            data: dict[str, Any] = json.loads(line)
        except json.JSONDecodeError as e:
            raise LocalStoreError(f"Invalid history output: {e}") from e
        entries.append(
            HistoryEntry(
                created_by=str(data.get("CreatedBy", "")),
                created_at=str(data.get("CreatedAt", "")),
                size=str(data.get("Size", "")).strip() or "0B",
            )
        )
    entries.reverse()
    return entries


class DockerImageStore(ImageStore):
    """ImageStore running the docker CLI as a subprocess per operation."""

    def __init__(self, binary: str = "docker") -> None:
        self.binary = binary

    def _env(self) -> dict[str, str]:
        return {key: os.environ[key] for key in ("HOME", "PATH") if key in os.environ}

    async def _run(self, *args: str) -> str:
        command = " ".join((self.binary,) + args)
        logger.debug(f"Running {command}")
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env(),
            )
        except OSError as e:
            raise LocalStoreError(f"Failed to run '{command}': {e}", command=command) from e

        stdout, stderr = await process.communicate()
        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            raise LocalStoreError(
                f"'{command}' failed with exit code {process.returncode}: {stderr_text}",
                command=command,
                returncode=process.returncode,
                stderr=stderr_text,
            )
        return stdout.decode("utf-8", errors="replace")

    async def inspect(self, identity: ImageIdentity) -> DigestRecord | None:
        try:
            output = await self._run("image", "inspect", "--format", "{{json .}}", identity.slug)
        except LocalStoreError as e:
            if any(marker in e.stderr for marker in MISSING_IMAGE_MARKERS):
                return None
            raise
        return parse_inspect(output)

    async def pull(self, identity: ImageIdentity) -> None:
        await self._run("pull", identity.slug)

    async def tag(self, identity: ImageIdentity, new_tag: str) -> None:
        await self._run("tag", identity.slug, identity.with_tag(new_tag).slug)

    async def remove_tag(self, identity: ImageIdentity) -> None:
        await self._run("rmi", identity.slug)

    async def history(self, identity: ImageIdentity) -> list[HistoryEntry]:
        output = await self._run("history", "--format", "{{json .}}", identity.slug)
        return parse_history(output)
