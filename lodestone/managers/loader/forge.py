"""
Forge installers from the Forge maven

Forge has renamed its maven folders several times over the years, so the
folder ("tag") for a given Minecraft/Forge pair has to be reconstructed
from the Minecraft version's shape. The rules in forge_version_tag() come
from the layout of the maven repository itself.
"""

import logging
from typing import Dict

from .base import LoaderResolver
from ...errors import InvalidVersionError, VersionNotFoundError
from ...models import LoaderArtifact
from ...utils.versioning import VersionKind, VersionTag

logger = logging.getLogger(__name__)

FORGE_PROMO_URL = "https://files.minecraftforge.net/net/minecraftforge/forge/promotions_slim.json"
FORGE_MAVEN_URL = "https://maven.minecraftforge.net/net/minecraftforge/forge"

# Forge does not provide installer jarfiles before Minecraft 1.5.2
MINECRAFT_CUTOFF = VersionTag.parse("1.5.2")

# NeoForge takes over after Minecraft 1.20.1
MINECRAFT_UPPER_CUTOFF = VersionTag.parse("1.20.1")

# 1.9/1.10 builds from here on are tagged 1.X-[installer]-1.X.0
LOADER_CUTOFF_TRIPLE = VersionTag.parse("12.16.1.1938")

# 1.9 builds up to here are tagged 1.9-[installer]-1.9
LOADER_CUTOFF_DOUBLE = VersionTag.parse("12.16.0.1885")

# The only release whose Minecraft version does not parse as ideal or general
PRERELEASE_TAG = "1.7.10_pre4"


def check_minecraft_cutoffs(minecraft: VersionTag) -> None:
    if minecraft < MINECRAFT_CUTOFF:
        raise InvalidVersionError(
            "forge does not provide installer jarfiles before Minecraft 1.5.2"
        )
    if minecraft > MINECRAFT_UPPER_CUTOFF:
        raise InvalidVersionError(
            f"forge is not supported after Minecraft {MINECRAFT_UPPER_CUTOFF}",
            hint="use the neoforge loader instead",
        )


def forge_version_tag(minecraft: VersionTag, loader: str) -> str:
    """
    Computes the maven folder name for a Minecraft/Forge pair

    Args:
        minecraft: Parsed Minecraft version
        loader: Forge build label, e.g. "12.17.0.2317"

    Returns:
        Tag such as "1.9.4-12.17.0.2317-1.9.4"

    Raises:
        InvalidVersionError: outside the range Forge published installers for
    """
    check_minecraft_cutoffs(minecraft)

    if minecraft.kind is VersionKind.IDEAL:
        if not 7 <= minecraft.minor < 10:
            return f"{minecraft}-{loader}"

        if minecraft.minor == 7 and minecraft.patch == 2:
            return f"1.7.2-{loader}-mc172"

        return f"{minecraft}-{loader}-{minecraft}"

    if minecraft.kind is VersionKind.GENERAL:
        minor = minecraft.minor
        loader_tag = VersionTag.parse(loader)

        if 9 <= minor < 11 and loader_tag >= LOADER_CUTOFF_TRIPLE:
            return f"{minecraft}-{loader}-{minecraft}.0"

        if minor == 9 and loader_tag <= LOADER_CUTOFF_DOUBLE:
            return f"{minecraft}-{loader}-{minecraft}"

        return f"{minecraft}-{loader}"

    return f"{PRERELEASE_TAG}-{loader}-prerelease"


def forge_installer_url(minecraft: VersionTag, loader: str) -> str:
    tag = forge_version_tag(minecraft, loader)
    return f"{FORGE_MAVEN_URL}/{tag}/forge-{tag}-installer.jar"


class ForgeResolver(LoaderResolver):
    """Resolves promotions ("latest"/"recommended") and builds the maven URL"""

    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        if minecraft_version != "latest":
            check_minecraft_cutoffs(VersionTag.parse(minecraft_version))

        promos = self.get_promos()

        if minecraft_version == "latest":
            minecraft = self._latest_minecraft(promos)
        else:
            minecraft = VersionTag.parse(minecraft_version)

        if loader_version in ("latest", "recommended"):
            key = f"{minecraft}-{loader_version}"
            if key not in promos:
                raise VersionNotFoundError(
                    f"failed to find a {loader_version} forge installer for Minecraft {minecraft}"
                )
            installer = promos[key]
        else:
            installer = loader_version

        logger.info("resolved forge %s for Minecraft %s", installer, minecraft)

        return LoaderArtifact(
            url=forge_installer_url(minecraft, installer),
            filename=f"forge-{minecraft}-{installer}.jar",
        )

    def get_promos(self) -> Dict[str, str]:
        logger.info("fetching forge promotions")
        return self.http.get_json(FORGE_PROMO_URL).get("promos", {})

    @staticmethod
    def _latest_minecraft(promos: Dict[str, str]) -> VersionTag:
        candidates = []
        for key in promos:
            tag = VersionTag.parse(key.rsplit("-", 1)[0])
            if tag.is_orderable and MINECRAFT_CUTOFF <= tag <= MINECRAFT_UPPER_CUTOFF:
                candidates.append(tag)

        if not candidates:
            raise VersionNotFoundError("failed to find the latest Minecraft version supported by forge")
        return max(candidates)
