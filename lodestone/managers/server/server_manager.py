import logging
from pathlib import Path
from typing import Callable, Optional

from ..loader import LoaderManager
from ..lockfile import LockfileStore
from ..mods import ModManager
from ...config import Settings
from ...core.api.client import HttpClient
from ...core.download import ArtifactDownloader
from ...errors import LodestoneError, NotInitializedError

logger = logging.getLogger(__name__)

EULA_FILENAME = "eula.txt"


class ServerManager:
    """Creates and reinstalls a server folder from its lockfile"""

    def __init__(self, server_folder: Path, http: Optional[HttpClient] = None, settings: Optional[Settings] = None):
        self.server_folder = Path(server_folder)
        self.settings = settings or (http.settings if http else Settings())
        self.http = http or HttpClient(self.settings)
        self.downloader = ArtifactDownloader(self.http, chunk_size=self.settings.chunk_size)
        self.loader_manager = LoaderManager(self.http, self.downloader)
        self.eula_path = self.server_folder / EULA_FILENAME

    def load_store(self) -> LockfileStore:
        return LockfileStore.init(self.server_folder, self.settings.lockfile_name)

    def mod_manager(self, store: Optional[LockfileStore] = None) -> ModManager:
        return ModManager(store or self.load_store(), self.http, self.downloader)

    def init(
        self,
        minecraft_version: str,
        loader: str,
        loader_version: str = "latest",
        snapshot: bool = False,
        log_callback: Optional[Callable[[str], None]] = None
    ) -> LockfileStore:
        """
        Writes a fresh lockfile, downloads the loader and signs the EULA

        Args:
            minecraft_version: Concrete Minecraft version
            loader: Loader name
            loader_version: Loader version or "latest"
            snapshot: Allow snapshot Minecraft versions (vanilla)
            log_callback: Function to report progress

        Returns:
            The new LockfileStore
        """
        self.server_folder.mkdir(parents=True, exist_ok=True)
        store = LockfileStore.with_params(
            self.server_folder,
            minecraft_version,
            loader,
            loader_version=loader_version,
            snapshot=snapshot,
            lockfile_name=self.settings.lockfile_name,
        )
        if log_callback:
            log_callback(f"Created {store.path.name} for {store.loader.name.value} {minecraft_version}\n")

        self.loader_manager.fetch(store.loader, self.server_folder, log_callback=log_callback)
        self.sign_eula(log_callback=log_callback)
        return store

    def install(self, log_callback: Optional[Callable[[str], None]] = None) -> LockfileStore:
        """
        Reproduces the server described by an existing lockfile

        Raises:
            NotInitializedError: when there is no initialized lockfile
        """
        store = self.load_store()
        if not store.is_initialized:
            raise NotInitializedError()

        self.loader_manager.fetch(store.loader, self.server_folder, log_callback=log_callback)

        mods = self.mod_manager(store)
        for record in store.mods:
            if log_callback:
                log_callback(f"Downloading {record.name} {record.version}\n")
            mods.download(record)

        self.sign_eula(log_callback=log_callback)
        logger.info("installed %d mods into %s", len(store.mods), self.server_folder)
        return store

    def sign_eula(self, log_callback: Optional[Callable[[str], None]] = None) -> Path:
        """Writes eula.txt with the EULA accepted, replacing any previous content"""
        try:
            with open(self.eula_path, 'w', encoding='utf-8') as file:
                file.write("# Signed by lodestone\n")
                file.write("eula=true\n")
        except OSError as e:
            raise LodestoneError(f"could not write {self.eula_path}: {e}")

        if log_callback:
            log_callback("[INFO] EULA accepted\n")
        return self.eula_path
