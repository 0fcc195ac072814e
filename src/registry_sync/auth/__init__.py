"""Registry credential resolution."""

from .credentials import CredentialResolver, parse_docker_config
from .keychain import InternetPassword, find_internet_password

__all__ = [
    "CredentialResolver",
    "InternetPassword",
    "find_internet_password",
    "parse_docker_config",
]
