"""Detection of shared build steps and layers across images.

Each image contributes a hash chain: every link hashes the previous link
together with the next entry, starting at the base of the image. Two images
produce the same link exactly when they are identical up to that entry, so
links used by several images identify shared base images and build steps.
"""

from ..models import DigestRecord, HistoryEntry, ImageIdentity
from ..utils.digest import chain_digest


class ChainStats:
    """Usage bookkeeping for one kind of hash chain."""

    def __init__(self) -> None:
        # Link hash -> images whose chain contains it, in first-seen order
        self.usage: dict[str, list[ImageIdentity]] = {}
        self.roots: list[str] = []
        # Image slug -> its chain, base first
        self.image_hashes: dict[str, list[str]] = {}

    def _add_chain(self, identity: ImageIdentity, payloads: list[tuple[str, ...]]) -> list[str]:
        hashes = []
        previous = ""
        for payload in payloads:
            link = chain_digest(previous, *payload)
            users = self.usage.get(link)
            if users is None:
                self.usage[link] = [identity]
                if not previous:
                    self.roots.append(link)
            elif identity not in users:
                users.append(identity)
            hashes.append(link)
            previous = link
        self.image_hashes[identity.slug] = hashes
        return hashes

    def is_shared(self, link: str) -> bool:
        return len(self.usage.get(link, ())) > 1

    @property
    def total_usages(self) -> int:
        """Number of (link, image) usages."""
        return sum(len(users) for users in self.usage.values())

    @property
    def shared_usages(self) -> int:
        """Usages of links that are shared by two or more images."""
        return sum(len(users) for users in self.usage.values() if len(users) > 1)

    @property
    def shared_links(self) -> int:
        """Distinct links shared by two or more images."""
        return sum(1 for users in self.usage.values() if len(users) > 1)

    @property
    def reuse_ratio(self) -> float:
        total = self.total_usages
        if total == 0:
            return 0.0
        return self.shared_usages / total


class HistoryChainStats(ChainStats):
    """Hash chains over image build history."""

    def __init__(self) -> None:
        super().__init__()
        self.entries: dict[str, HistoryEntry] = {}

    def accumulate(self, identity: ImageIdentity, history: list[HistoryEntry]) -> list[str]:
        """Add the history of an image, given oldest entry first."""
        hashes = self._add_chain(
            identity,
            [(entry.created_by, entry.created_at, entry.size) for entry in history],
        )
        for link, entry in zip(hashes, history):
            self.entries.setdefault(link, entry)
        return hashes

    @property
    def total_bytes(self) -> int:
        """Disk usage with every distinct build step counted once."""
        return sum(entry.size_bytes for entry in self.entries.values())

    def shared_bytes(self, identity: ImageIdentity) -> int:
        """Bytes of an image's build steps that other images reuse."""
        return sum(
            self.entries[link].size_bytes
            for link in self.image_hashes.get(identity.slug, [])
            if self.is_shared(link)
        )


class LayerChainStats(ChainStats):
    """Hash chains over image layer digests."""

    def accumulate(self, identity: ImageIdentity, layers: list[str]) -> list[str]:
        """Add the layer digests of an image, base layer first."""
        return self._add_chain(identity, [(layer,) for layer in layers])

    @property
    def unique_base_images(self) -> int:
        return len(self.roots)


class DedupAnalyzer:
    """Accumulates layer and history chains of all processed images."""

    def __init__(self) -> None:
        self.history = HistoryChainStats()
        self.layers = LayerChainStats()

    def accumulate(
        self, identity: ImageIdentity, record: DigestRecord | None, history: list[HistoryEntry]
    ) -> None:
        if record is not None:
            self.layers.accumulate(identity, record.root_layers)
        self.history.accumulate(identity, history)

    @property
    def total_real_bytes(self) -> int:
        return self.history.total_bytes
