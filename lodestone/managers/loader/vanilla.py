"""Vanilla server jars from Mojang's version manifest"""

import logging
from typing import Dict

from .base import LoaderResolver
from ...core.api.client import HttpClient
from ...errors import InvalidVersionError, VersionNotFoundError
from ...models import Checksum, LoaderArtifact

logger = logging.getLogger(__name__)

VERSION_MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest.json"


class VanillaResolver(LoaderResolver):
    """Vanilla has no loader version; only the Minecraft version matters"""

    def __init__(self, http: HttpClient, snapshot: bool = False):
        super().__init__(http)
        self.snapshot = snapshot

    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        version = self._get_version(minecraft_version)

        if version.get("type") == "snapshot" and not self.snapshot:
            raise InvalidVersionError(
                f"Minecraft {version['id']} is a snapshot",
                hint="initialize the server with --snapshot to allow snapshots",
            )

        version_details = self.http.get_json(version["url"])
        server_info = version_details.get("downloads", {}).get("server")
        if not server_info:
            raise VersionNotFoundError(f"Minecraft {version['id']} has no server jar")

        return LoaderArtifact(
            url=server_info["url"],
            filename=f"vanilla-{version['id']}-server.jar",
            checksum=Checksum(method="sha1", hash=server_info["sha1"]),
        )

    def _get_version(self, minecraft_version: str) -> Dict:
        logger.info("fetching version manifest")
        manifest = self.http.get_json(VERSION_MANIFEST_URL)

        version_id = minecraft_version
        if minecraft_version == "latest":
            latest = manifest.get("latest", {})
            version_id = latest.get("snapshot") if self.snapshot else latest.get("release")

        for version in manifest.get("versions", []):
            if version.get("id") == version_id:
                return version

        raise VersionNotFoundError(f"Minecraft version {version_id} not found")
