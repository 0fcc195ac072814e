"""Contract between the scheduler and the per-image work it drives."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class ItemError:
    """Failure of one item, tagged with its position in the input."""

    index: int
    slug: str
    error: Exception

    @property
    def message(self) -> str:
        return f"{self.slug}: {self.error}"


class Processor(ABC, Generic[T]):
    """Work applied to every image reference of a run."""

    @abstractmethod
    async def process(self, slug: str, index: int, total: int) -> T:
        """Process one reference; exceptions are captured per item."""

    def fulfilled(self, result: T, index: int, total: int) -> None:
        """Called with the result of every successful item."""

    def error(self, failure: ItemError, total: int) -> None:
        """Called for every failed item."""

    @abstractmethod
    def complete(self, errors: list[ItemError]) -> None:
        """Called once after every item has succeeded or failed."""
