import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .client import HttpClient
from ...errors import (
    IncompatibleArtifactError,
    IncompatiblePlatformError,
    IncompatibleVersionError,
    NotFoundError,
    SelfDependencyError,
)
from ...models import ArtifactRecord, Checksum, DependencyRef, LoaderConfig, Provider

logger = logging.getLogger(__name__)


class ProviderClient(ABC):
    """Resolves a project id and version token into an installable record"""

    provider: Provider

    def __init__(self, http: HttpClient):
        self.http = http

    @abstractmethod
    def resolve_artifact(self, loader: LoaderConfig, project_id: str, version: str) -> ArtifactRecord:
        """
        Resolves a project against the server's loader configuration

        Args:
            loader: Loader section of the lockfile (loader name + Minecraft version)
            project_id: Project id or slug
            version: Version token, or "latest"

        Returns:
            Normalized ArtifactRecord ready to download
        """
        ...


class ModrinthAPI(ProviderClient):
    """Handles requests to the Modrinth API for mods and plugins"""

    provider = Provider.MODRINTH

    def __init__(self, http: HttpClient, base_url: Optional[str] = None):
        super().__init__(http)
        self.base_url = (base_url or http.settings.modrinth_url).rstrip("/")

    def get_project(self, project_id: str) -> Dict:
        try:
            return self.http.get_json(f"{self.base_url}/project/{project_id}")
        except NotFoundError:
            raise NotFoundError(f"project {project_id} does not exist")

    def get_version(self, version_id: str) -> Dict:
        try:
            return self.http.get_json(f"{self.base_url}/version/{version_id}")
        except NotFoundError:
            raise NotFoundError(f"version {version_id} does not exist")

    def resolve_artifact(self, loader: LoaderConfig, project_id: str, version: str) -> ArtifactRecord:
        logger.info("fetching project info for %s", project_id)
        project = self.get_project(project_id)

        slug = project["slug"]
        canonical_id = project["id"]
        loader_name = loader.name.value
        minecraft_version = loader.minecraft_version

        # Modrinth reports "required", "optional", "unsupported" or "unknown"
        server_side = project.get("server_side", "unknown")
        if server_side == "unsupported":
            raise IncompatiblePlatformError(f"project {slug} does not support server-side")
        if server_side == "unknown":
            logger.warning("project %s may not support server-side", slug)

        if loader_name not in project.get("loaders", []):
            raise IncompatiblePlatformError(f"project {slug} does not support {loader_name}")

        if minecraft_version not in project.get("game_versions", []):
            raise IncompatibleVersionError(
                f"project {slug} does not support Minecraft version {minecraft_version}"
            )

        if version == "latest":
            version_info = self._get_latest_version(slug, minecraft_version, loader_name)
        else:
            if version not in project.get("versions", []):
                raise NotFoundError(f"project {slug} has no version {version}")
            version_info = self._get_specific_version(canonical_id, slug, version, minecraft_version, loader_name)

        project_file = self._select_jar(slug, version_info)

        return ArtifactRecord(
            name=slug,
            id=canonical_id,
            version=version_info["id"],
            source=Provider.MODRINTH,
            download_url=project_file["url"],
            checksum=Checksum(method="sha512", hash=project_file["hashes"]["sha512"]),
            dependencies=self._map_dependencies(canonical_id, slug, version_info.get("dependencies", [])),
        )

    def _get_latest_version(self, slug: str, minecraft_version: str, loader_name: str) -> Dict:
        logger.info("fetching latest version of %s", slug)
        params = {
            "game_versions": json.dumps([minecraft_version]),
            "loaders": json.dumps([loader_name]),
        }
        try:
            versions = self.http.get_json(f"{self.base_url}/project/{slug}/version", params=params)
        except NotFoundError:
            raise NotFoundError(f"{slug} has no valid versions")

        for version_info in versions:
            if minecraft_version in version_info.get("game_versions", []) and loader_name in version_info.get("loaders", []):
                return version_info

        raise NotFoundError(
            f"{slug} for {loader_name} has no version that supports Minecraft {minecraft_version}"
        )

    def _get_specific_version(
        self,
        canonical_id: str,
        slug: str,
        version: str,
        minecraft_version: str,
        loader_name: str
    ) -> Dict:
        logger.info("fetching version %s of %s", version, slug)
        version_info = self.get_version(version)

        if version_info.get("project_id") != canonical_id:
            raise IncompatibleArtifactError(f"version {version} is not a part of project {slug}")

        if minecraft_version not in version_info.get("game_versions", []):
            raise IncompatibleVersionError(
                f"version {version} does not support Minecraft {minecraft_version}"
            )

        if loader_name not in version_info.get("loaders", []):
            raise IncompatiblePlatformError(f"version {version} does not support {loader_name}")

        return version_info

    @staticmethod
    def _select_jar(slug: str, version_info: Dict) -> Dict:
        jars = [f for f in version_info.get("files", []) if f.get("filename", "").endswith(".jar")]
        if not jars:
            raise NotFoundError(f"version {version_info.get('id')} of {slug} has no jar file")

        # Prefer the primary file when a version ships several jars
        for jar in jars:
            if jar.get("primary"):
                return jar
        return jars[0]

    def _map_dependencies(self, canonical_id: str, slug: str, dependencies: List[Dict]) -> Optional[List[DependencyRef]]:
        refs = []
        for dependency in dependencies:
            dependency_type = dependency.get("dependency_type")
            if dependency_type not in ("required", "optional"):
                continue

            dep_project_id = dependency.get("project_id")
            if not dep_project_id and dependency.get("version_id"):
                dep_project_id = self.get_version(dependency["version_id"]).get("project_id")
            if not dep_project_id:
                logger.warning("skipping dependency of %s without a project id", slug)
                continue

            if dep_project_id == canonical_id:
                raise SelfDependencyError(f"project {slug} depends on itself")

            dep_project = self.get_project(dep_project_id)
            refs.append(DependencyRef(
                id=dep_project_id,
                name=dep_project["slug"].lower(),
                source=Provider.MODRINTH,
                required=dependency_type == "required",
            ))

        return refs or None


class HangarAPI(ProviderClient):
    """Handles requests to the Hangar API for Paper plugins"""

    provider = Provider.HANGAR

    def __init__(self, http: HttpClient, base_url: Optional[str] = None):
        super().__init__(http)
        self.base_url = (base_url or http.settings.hangar_url).rstrip("/")

    def resolve_artifact(self, loader: LoaderConfig, project_id: str, version: str) -> ArtifactRecord:
        logger.info("fetching info of project %s", project_id)
        try:
            project = self.http.get_json(f"{self.base_url}/projects/{project_id}")
        except NotFoundError:
            raise NotFoundError(f"project {project_id} does not exist")

        name = project["name"]
        canonical_id = str(project.get("id", name))

        if version == "latest":
            logger.info("fetching latest version of project %s", name)
            try:
                version = self.http.get_text(f"{self.base_url}/projects/{name}/latestrelease")
            except NotFoundError:
                raise NotFoundError(f"project {name} has no releases")

        logger.info("fetching info for %s v%s", name, version)
        try:
            version_info = self.http.get_json(f"{self.base_url}/projects/{name}/versions/{version}")
        except NotFoundError:
            raise NotFoundError(f"project {name} has no version {version}")

        platform = loader.name.value.upper()
        platform_versions = version_info.get("platformDependencies", {})
        if platform not in platform_versions:
            raise IncompatiblePlatformError(f"{name} version {version} does not support {platform}")

        # Exact match only; Hangar lists every supported version individually
        if loader.minecraft_version not in platform_versions[platform]:
            raise IncompatibleVersionError(
                f"{name} version {version} is incompatible with Minecraft version {loader.minecraft_version}"
            )

        download = version_info.get("downloads", {}).get(platform) or {}
        download_url = download.get("downloadUrl")
        if not download_url:
            raise NotFoundError(f"{name} version {version} is only available from an external site")

        file_info = download.get("fileInfo") or {}
        checksum = None
        if file_info.get("sha256Hash"):
            checksum = Checksum(method="sha256", hash=file_info["sha256Hash"])

        dependencies = self._map_dependencies(
            canonical_id, name, version_info.get("pluginDependencies", {}).get(platform, [])
        )

        return ArtifactRecord(
            name=name,
            id=canonical_id,
            version=version,
            source=Provider.HANGAR,
            download_url=download_url,
            checksum=checksum,
            dependencies=dependencies,
        )

    @staticmethod
    def _map_dependencies(canonical_id: str, name: str, dependencies: List[Dict]) -> Optional[List[DependencyRef]]:
        refs = []
        for dependency in dependencies:
            dep_name = dependency["name"]
            dep_id = dependency.get("projectId")
            dep_id = str(dep_id) if dep_id is not None else dep_name

            if dep_id == canonical_id or dep_name.lower() == name.lower():
                raise SelfDependencyError(f"project {name} depends on itself")

            refs.append(DependencyRef(
                id=dep_id,
                name=dep_name.lower(),
                source=Provider.HANGAR,
                required=bool(dependency.get("required", False)),
            ))

        return refs or None


PROVIDER_CLIENTS = {
    Provider.MODRINTH: ModrinthAPI,
    Provider.HANGAR: HangarAPI,
}


def get_provider_client(provider: Provider, http: HttpClient) -> ProviderClient:
    """Returns the client implementation for a provider"""
    return PROVIDER_CLIENTS[provider](http)
