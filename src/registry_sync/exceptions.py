"""Custom exceptions for registry synchronization."""


class RegistrySyncError(Exception):
    """Base exception for all synchronization errors."""

    pass


class MalformedReferenceError(RegistrySyncError):
    """Raised when an image reference cannot be parsed."""

    pass


class RegistryConnectionError(RegistrySyncError):
    """Raised when the registry cannot be reached after retrying."""

    pass


class AuthDiscoveryError(RegistrySyncError):
    """Raised when the bearer-token endpoint of a registry cannot be discovered."""

    pass


class TokenFetchError(RegistrySyncError):
    """Raised when a pull token cannot be obtained."""

    pass


class DigestFetchError(RegistrySyncError):
    """Raised when the remote manifest digest cannot be read."""

    pass


class LocalStoreError(RegistrySyncError):
    """Raised when a local image store operation fails."""

    def __init__(
        self, message: str, command: str = "", returncode: int | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class RefreshFailedError(RegistrySyncError):
    """Raised when a freshly pulled image does not match the remote digest."""

    pass


class ManifestFileError(RegistrySyncError):
    """Raised when a manifest file listing images cannot be read."""

    pass


class UnsupportedPlatformError(RegistrySyncError):
    """Raised when a platform credential store is not available."""

    pass


class PasswordNotFoundError(RegistrySyncError):
    """Raised when the platform credential store has no entry for a service."""

    pass
