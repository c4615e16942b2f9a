"""Paper server jars from the PaperMC downloads API"""

import logging
from typing import Dict

from .base import LoaderResolver
from ...errors import InvalidVersionError, NotFoundError, VersionNotFoundError
from ...models import Checksum, LoaderArtifact

logger = logging.getLogger(__name__)

PAPER_API_URL = "https://api.papermc.io/v2/projects/paper"


class PaperResolver(LoaderResolver):
    """Versions and builds are listed oldest first, so "latest" is the last entry"""

    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        minecraft = self._resolve_minecraft(minecraft_version)
        build = self._resolve_build(minecraft, loader_version)

        build_number = build["build"]
        filename = f"paper-{minecraft}-{build_number}.jar"
        url = f"{PAPER_API_URL}/versions/{minecraft}/builds/{build_number}/downloads/{filename}"

        sha256 = build.get("downloads", {}).get("application", {}).get("sha256")
        checksum = Checksum(method="sha256", hash=sha256) if sha256 else None

        return LoaderArtifact(url=url, filename=filename, checksum=checksum)

    def _resolve_minecraft(self, minecraft_version: str) -> str:
        logger.info("fetching paper versions")
        versions = self.http.get_json(PAPER_API_URL).get("versions", [])

        if minecraft_version == "latest":
            if not versions:
                raise VersionNotFoundError("could not get latest minecraft version")
            return versions[-1]

        if minecraft_version not in versions:
            raise VersionNotFoundError(f"paper does not support Minecraft {minecraft_version}")
        return minecraft_version

    def _resolve_build(self, minecraft: str, loader_version: str) -> Dict:
        logger.info("fetching paper builds for %s", minecraft)
        try:
            builds = self.http.get_json(f"{PAPER_API_URL}/versions/{minecraft}/builds").get("builds", [])
        except NotFoundError:
            raise VersionNotFoundError(f"paper has no builds for Minecraft {minecraft}")

        if loader_version == "latest":
            if not builds:
                raise VersionNotFoundError("could not get latest loader version")
            return builds[-1]

        try:
            wanted = int(loader_version)
        except ValueError:
            raise InvalidVersionError(f"paper build '{loader_version}' is not a number")

        for build in builds:
            if build.get("build") == wanted:
                return build

        raise VersionNotFoundError(f"paper build {wanted} does not exist for Minecraft {minecraft}")
