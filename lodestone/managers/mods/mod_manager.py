import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..lockfile import LockfileStore
from ...core.api.client import HttpClient
from ...core.api.handlers import ProviderClient, get_provider_client
from ...core.download import ArtifactDownloader
from ...errors import (
    AlreadyInstalledError,
    CyclicDependencyError,
    LodestoneError,
    NotInitializedError,
)
from ...models import ArtifactRecord, Provider

logger = logging.getLogger(__name__)


class ModManager:
    """
    Adds, removes and updates mods/plugins of one server

    Every successful step is committed to the lockfile store before the
    next one starts, so dependencies installed by a failed add() stay
    installed and recorded.
    """

    def __init__(
        self,
        store: LockfileStore,
        http: HttpClient,
        downloader: Optional[ArtifactDownloader] = None,
        clients: Optional[Dict[Provider, ProviderClient]] = None
    ):
        self.store = store
        self.server_folder = store.path.parent
        self.http = http
        self.downloader = downloader or ArtifactDownloader(http)
        self._clients: Dict[Provider, ProviderClient] = dict(clients or {})

    def client(self, provider: Provider) -> ProviderClient:
        if provider not in self._clients:
            self._clients[provider] = get_provider_client(provider, self.http)
        return self._clients[provider]

    def _require_initialized(self) -> None:
        if not self.store.is_initialized:
            raise NotInitializedError()

    # ==================== ADD ====================

    def add(
        self,
        provider: Provider,
        project_id: str,
        version: str = "latest",
        include_optional: bool = False,
        skip_dependencies: bool = False
    ) -> ArtifactRecord:
        """
        Installs a project and (unless skipped) its dependencies

        Args:
            provider: Catalog to resolve the project from
            project_id: Project id or slug
            version: Version token or "latest"
            include_optional: Also install optional dependencies
            skip_dependencies: Install only the project itself

        Returns:
            The committed ArtifactRecord
        """
        self._require_initialized()
        return self._add(provider, project_id, version, include_optional, skip_dependencies, ())

    def _add(
        self,
        provider: Provider,
        project_id: str,
        version: str,
        include_optional: bool,
        skip_dependencies: bool,
        chain: tuple
    ) -> ArtifactRecord:
        if project_id in chain:
            raise CyclicDependencyError(list(chain) + [project_id])

        self._ensure_not_installed(project_id)

        logger.info("adding %s version %s from %s", project_id, version, provider.value)
        record = self.client(provider).resolve_artifact(self.store.loader, project_id, version)

        if record.id in chain or record.name in chain:
            raise CyclicDependencyError(list(chain) + [record.name])
        if record.id != project_id:
            self._ensure_not_installed(record.id)
        if record.name != project_id:
            self._ensure_not_installed(record.name)

        resolving = chain + (record.id,)

        if not skip_dependencies:
            for dependency in record.dependencies or []:
                if not dependency.required and not include_optional:
                    continue

                # Hangar dependencies without a project id carry the name as id
                installed = self.store.find_dependency(dependency) or self.store.find(dependency.id)
                if installed is not None:
                    logger.warning(
                        "dependency %s of %s is already installed, skipping",
                        dependency.name, record.name
                    )
                    continue

                self._add(dependency.source, dependency.id, "latest", include_optional, False, resolving)

        self.download(record)
        self.store.add(record)
        logger.info("installed %s %s", record.name, record.version)
        return record

    def _ensure_not_installed(self, project_id: str) -> None:
        existing = self.store.find(project_id)
        if existing is not None:
            raise AlreadyInstalledError(
                f"project '{existing.name}' version {existing.version} is already installed",
                hint="use `lodestone mod update` to change its version",
            )

    # ==================== DOWNLOAD ====================

    def download(self, record: ArtifactRecord) -> Path:
        """Downloads a record's jar into the loader's mod folder"""
        destination = record.file_path(self.server_folder, self.store.loader.name)
        logger.info(
            "downloading %s for %s version %s",
            record.name, self.store.loader.name.value, record.version
        )

        if record.checksum is None:
            return self.downloader.fetch(record.download_url, destination)

        return self.downloader.fetch_with_checksum(
            record.download_url, destination, record.checksum.method, record.checksum.hash
        )

    # ==================== REMOVE ====================

    def remove(self, project_id: str, keep_file: bool = False, remove_orphans: bool = False) -> List[ArtifactRecord]:
        """
        Removes a project and optionally the dependencies nothing else needs

        Args:
            project_id: Project id or slug
            keep_file: Leave the downloaded jar(s) on disk
            remove_orphans: Also remove dependencies left without a dependent

        Returns:
            Every record removed from the lockfile
        """
        self._require_initialized()
        target = self.store.get(project_id)

        removed = [target]
        if remove_orphans:
            removed.extend(self.find_orphans(target))

        if not keep_file:
            for record in removed:
                self._delete_file(record)

        self.store.remove([record.id for record in removed])
        for record in removed:
            logger.info("removed %s", record.name)
        return removed

    def find_orphans(self, target: ArtifactRecord) -> List[ArtifactRecord]:
        """Installed dependencies of target that no other record requires"""
        remaining = [record for record in self.store.mods if record is not target]

        orphans = []
        for dependency in target.dependencies or []:
            installed = self.store.find_dependency(dependency)
            if installed is None or installed is target or installed in orphans:
                continue

            needed = any(
                other_dependency.matches(installed)
                for other in remaining
                if other is not installed
                for other_dependency in other.required_dependencies()
            )
            if not needed:
                orphans.append(installed)

        return orphans

    def _delete_file(self, record: ArtifactRecord) -> None:
        path = record.file_path(self.server_folder, self.store.loader.name)
        try:
            path.unlink()
        except OSError as e:
            logger.warning("could not delete %s: %s", path, e)

    # ==================== UPDATE ====================

    def update(self, project_id: str = "all", version: str = "latest") -> List[ArtifactRecord]:
        """
        Re-resolves installed projects and installs newer versions

        Args:
            project_id: Project id/slug, or "all" for every installed project
            version: Version token (only "latest" is allowed with "all")

        Returns:
            Records that changed version
        """
        self._require_initialized()

        if project_id != "all":
            updated = self._update_one(self.store.get(project_id), version)
            return [updated] if updated else []

        if version != "latest":
            raise LodestoneError("a specific version can only be requested for a single project")

        changed = []
        for record in list(self.store.mods):
            updated = self._update_one(record, "latest")
            if updated:
                changed.append(updated)
        return changed

    def _update_one(self, installed: ArtifactRecord, version: str) -> Optional[ArtifactRecord]:
        logger.info("checking %s for updates", installed.name)
        record = self.client(installed.source).resolve_artifact(self.store.loader, installed.id, version)

        if record.version == installed.version:
            logger.info("%s is up to date (%s)", installed.name, installed.version)
            return None

        old_path = installed.file_path(self.server_folder, self.store.loader.name)
        new_path = self.download(record)
        if old_path != new_path:
            self._delete_file(installed)

        self.store.add(record)
        logger.info("updated %s from %s to %s", record.name, installed.version, record.version)
        return record
