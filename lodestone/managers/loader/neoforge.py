"""NeoForge installers from the NeoForged maven"""

import logging

from .base import LoaderResolver
from ...errors import InvalidVersionError, NotFoundError, VersionNotFoundError
from ...models import LoaderArtifact
from ...utils.versioning import VersionTag

logger = logging.getLogger(__name__)

NEOFORGE_API_URL = "https://maven.neoforged.net/api/maven/latest/version/releases/net/neoforged/neoforge"
NEOFORGE_MAVEN_URL = "https://maven.neoforged.net/releases/net/neoforged/neoforge"

# Last Minecraft version without NeoForge builds; Forge covers it
MINECRAFT_CUTOFF = VersionTag.parse("1.20.1")


class NeoForgeResolver(LoaderResolver):
    """
    NeoForge versions are named after the Minecraft minor/patch pair
    (Minecraft 1.20.4 -> NeoForge 20.4.x), so a concrete Minecraft version
    is always needed to pick an installer.
    """

    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        if minecraft_version == "latest":
            raise InvalidVersionError(
                "neoforge needs an explicit Minecraft version",
                hint="pass a version such as 1.20.4",
            )

        minecraft = VersionTag.parse(minecraft_version)
        if minecraft.is_complex:
            raise InvalidVersionError(f"invalid minecraft version {minecraft_version}")

        if minecraft <= MINECRAFT_CUTOFF:
            raise InvalidVersionError(
                f"neoforge does not support Minecraft {minecraft_version}",
                hint=f"use forge for Minecraft {MINECRAFT_CUTOFF} and earlier",
            )

        patch = minecraft.chunks[2] if len(minecraft.chunks) > 2 else 0
        prefix = f"{minecraft.minor}.{patch}"

        if loader_version == "latest":
            version = self._latest_for(prefix, minecraft_version)
        elif loader_version.startswith(f"{prefix}."):
            version = loader_version
        else:
            raise VersionNotFoundError(
                f"neoforge {loader_version} does not target Minecraft {minecraft_version}"
            )

        return LoaderArtifact(
            url=f"{NEOFORGE_MAVEN_URL}/{version}/neoforge-{version}-installer.jar",
            filename=f"neoforge-{minecraft_version}-{version}.jar",
        )

    def _latest_for(self, prefix: str, minecraft_version: str) -> str:
        logger.info("fetching latest installer version for minecraft %s", minecraft_version)
        try:
            installer = self.http.get_json(NEOFORGE_API_URL, params={"filter": prefix})
        except NotFoundError:
            raise VersionNotFoundError(f"no neoforge release for Minecraft {minecraft_version}")

        version = installer.get("version")
        if not version:
            raise VersionNotFoundError(f"no neoforge release for Minecraft {minecraft_version}")
        return version
