"""Base class for loader version resolvers"""

from abc import ABC, abstractmethod

from ...core.api.client import HttpClient
from ...models import LoaderArtifact


class LoaderResolver(ABC):
    """Turns a Minecraft version and a loader version into a download"""

    def __init__(self, http: HttpClient):
        self.http = http

    @abstractmethod
    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        """
        Resolves the installer/server jar to download

        Args:
            minecraft_version: Concrete Minecraft version or "latest"
            loader_version: Concrete loader version/build or a sentinel
                ("latest", and "recommended" for Forge)

        Returns:
            LoaderArtifact with URL, target filename and optional checksum
        """
        ...
