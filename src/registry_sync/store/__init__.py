"""Local image store implementations."""

from .base import ImageStore
from .docker import DockerImageStore, parse_history, parse_inspect

__all__ = ["DockerImageStore", "ImageStore", "parse_history", "parse_inspect"]
