import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Type

from .base import LoaderResolver
from .fabric import FabricResolver
from .forge import ForgeResolver
from .neoforge import NeoForgeResolver
from .paper import PaperResolver
from .vanilla import VanillaResolver
from ...core.api.client import HttpClient
from ...core.download import ArtifactDownloader
from ...errors import InvalidLoaderError
from ...models import Loader, LoaderArtifact, LoaderConfig

logger = logging.getLogger(__name__)


class LoaderManager:
    """Downloads the server runtime (Paper/Fabric/Forge/NeoForge/Vanilla)"""

    RESOLVERS: Dict[Loader, Type[LoaderResolver]] = {
        Loader.PAPER: PaperResolver,
        Loader.FABRIC: FabricResolver,
        Loader.FORGE: ForgeResolver,
        Loader.NEOFORGE: NeoForgeResolver,
        Loader.VANILLA: VanillaResolver,
    }

    def __init__(self, http: HttpClient, downloader: Optional[ArtifactDownloader] = None):
        self.http = http
        self.downloader = downloader or ArtifactDownloader(http)

    def get_resolver(self, loader: Loader, snapshot: bool = False) -> LoaderResolver:
        if loader not in self.RESOLVERS:
            raise InvalidLoaderError(
                f"cannot install loader '{loader.value}'",
                hint=f"try one of: {', '.join(Loader.valid_names())}",
            )
        if loader is Loader.VANILLA:
            return VanillaResolver(self.http, snapshot=snapshot)
        return self.RESOLVERS[loader](self.http)

    def resolve(self, config: LoaderConfig) -> LoaderArtifact:
        resolver = self.get_resolver(config.name, snapshot=config.snapshot)
        return resolver.resolve(config.minecraft_version, config.version)

    def fetch(
        self,
        config: LoaderConfig,
        server_folder: Path,
        log_callback: Optional[Callable[[str], None]] = None
    ) -> Path:
        """
        Resolves and downloads the loader described by config

        Args:
            config: Loader section of the lockfile
            server_folder: Folder of the server
            log_callback: Function to report progress

        Returns:
            Path of the downloaded jar
        """
        artifact = self.resolve(config)
        destination = Path(server_folder) / artifact.filename

        if log_callback:
            log_callback(f"Downloading {config.name.value} to {artifact.filename}\n")

        if artifact.checksum:
            self.downloader.fetch_with_checksum(
                artifact.url, destination, artifact.checksum.method, artifact.checksum.hash
            )
        else:
            self.downloader.fetch(artifact.url, destination)

        if config.name is Loader.NEOFORGE or config.name is Loader.FORGE:
            logger.warning("%s servers must be installed manually using %s", config.name.value, artifact.filename)

        return destination
