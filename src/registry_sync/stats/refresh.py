"""Byte accounting of a synchronization run."""

from dataclasses import dataclass, fields


@dataclass
class RunStats:
    """Totals of bytes moved by refreshed images.

    ``accumulate`` is a field-wise sum, so partial stats can be merged in
    any order and grouping with identical results.
    """

    bytes_added: int = 0
    bytes_removed: int = 0
    bytes_steady: int = 0
    images_refreshed: int = 0

    def accumulate(self, other: "RunStats | None") -> "RunStats":
        """Merge other stats into these and return self."""
        if other is None:
            return self
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        return self

    def __add__(self, other: "RunStats") -> "RunStats":
        return RunStats().accumulate(self).accumulate(other)

    @property
    def delta(self) -> int:
        return self.bytes_added - self.bytes_removed

    @property
    def total_virtual(self) -> int:
        return self.bytes_steady + self.bytes_added
