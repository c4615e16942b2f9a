"""Exception hierarchy shared by every lodestone component"""

from typing import List, Optional


class LodestoneError(Exception):
    """Base error, optionally carrying a hint shown to the user"""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}\nHint: {self.hint}"
        return message


class NotInitializedError(LodestoneError):
    """Raised when the server directory has no usable lockfile"""

    def __init__(self, message: str = "server is not initialized"):
        super().__init__(message, hint="run `lodestone server init` first")


class AlreadyInstalledError(LodestoneError):
    """Raised when adding a project that is already in the lockfile"""


class NotFoundError(LodestoneError):
    """Raised when a project, version or lockfile entry does not exist"""


class VersionNotFoundError(NotFoundError):
    """Raised when a loader version or build cannot be resolved"""


class IncompatibleArtifactError(LodestoneError):
    """Raised when a project cannot be installed on the configured server"""


class IncompatiblePlatformError(IncompatibleArtifactError):
    """The project does not support the server loader or server side"""


class IncompatibleVersionError(IncompatibleArtifactError):
    """The project does not support the server Minecraft version"""


class SelfDependencyError(IncompatibleArtifactError):
    """The project declares a dependency on itself"""


class CyclicDependencyError(LodestoneError):
    """Raised when dependency resolution revisits a project"""

    def __init__(self, chain: List[str]):
        self.chain = list(chain)
        super().__init__(f"cyclic dependency detected: {' -> '.join(self.chain)}")


class InvalidVersionError(LodestoneError):
    """Raised for unparseable or unsupported Minecraft/loader versions"""


class InvalidLoaderError(LodestoneError):
    """Raised for a loader name outside the supported set"""


class InvalidProviderError(LodestoneError):
    """Raised for a provider name outside the supported set"""


class ChecksumMismatchError(LodestoneError):
    """Raised when a downloaded file does not match its declared digest"""

    def __init__(self, path: str, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum mismatch for {path}: expected {expected}, got {actual}"
        )


class InvalidChecksumError(LodestoneError):
    """Raised for a checksum method hashlib does not provide"""


class LockfileError(LodestoneError):
    """Raised when the lockfile cannot be read or written"""


class TransportError(LodestoneError):
    """Raised for network failures and undecodable responses"""


__all__ = [
    "AlreadyInstalledError",
    "ChecksumMismatchError",
    "CyclicDependencyError",
    "IncompatibleArtifactError",
    "IncompatiblePlatformError",
    "IncompatibleVersionError",
    "InvalidChecksumError",
    "InvalidLoaderError",
    "InvalidProviderError",
    "InvalidVersionError",
    "LockfileError",
    "LodestoneError",
    "NotFoundError",
    "NotInitializedError",
    "SelfDependencyError",
    "TransportError",
    "VersionNotFoundError",
]
