"""Core registry client, session and configuration types."""

from .auth_client import AuthClient
from .registry_client import RegistryClient
from .types import RequestResult, SyncConfig

__all__ = ["AuthClient", "RegistryClient", "RequestResult", "SyncConfig"]
