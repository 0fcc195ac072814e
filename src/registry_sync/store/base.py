"""Contract of the local image store."""

from abc import ABC, abstractmethod

from ..models import DigestRecord, HistoryEntry, ImageIdentity


class ImageStore(ABC):
    """Local container image store.

    Implementations raise ``LocalStoreError`` for every failure except an
    image that is simply not present, which ``inspect`` reports as None.
    """

    @abstractmethod
    async def inspect(self, identity: ImageIdentity) -> DigestRecord | None:
        """Inspect a local image, None if it is not present."""

    @abstractmethod
    async def pull(self, identity: ImageIdentity) -> None:
        """Pull an image from its registry."""

    @abstractmethod
    async def tag(self, identity: ImageIdentity, new_tag: str) -> None:
        """Tag an existing image with another tag of the same reference."""

    @abstractmethod
    async def remove_tag(self, identity: ImageIdentity) -> None:
        """Remove a tag from the local store."""

    @abstractmethod
    async def history(self, identity: ImageIdentity) -> list[HistoryEntry]:
        """Build history of an image, oldest entry first."""
