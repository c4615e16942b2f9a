"""Fabric server launcher jars from the Fabric meta API"""

import logging
from typing import Dict, List

from .base import LoaderResolver
from ...models import LoaderArtifact
from ...errors import VersionNotFoundError

logger = logging.getLogger(__name__)

FABRIC_META_URL = "https://meta.fabricmc.net/v2/versions"


class FabricResolver(LoaderResolver):
    """Fabric meta lists newest first, so "latest" is the first entry"""

    def resolve(self, minecraft_version: str, loader_version: str) -> LoaderArtifact:
        game = self._pick("game", self._list("game"), minecraft_version)
        loader = self._pick("loader", self._list("loader"), loader_version)

        logger.info("fetching latest installer")
        installers = self._list("installer")
        if not installers:
            raise VersionNotFoundError("failed to retrieve latest installer")
        installer = installers[0]["version"]

        url = f"{FABRIC_META_URL}/loader/{game}/{loader}/{installer}/server/jar"
        filename = f"fabric-server-mc.{game}-loader.{loader}-launcher.{installer}.jar"

        return LoaderArtifact(url=url, filename=filename)

    def _list(self, path: str) -> List[Dict]:
        return self.http.get_json(f"{FABRIC_META_URL}/{path}")

    @staticmethod
    def _pick(kind: str, versions: List[Dict], wanted: str) -> str:
        logger.info("fetching information for %s version %s", kind, wanted)

        if wanted == "latest":
            if not versions:
                raise VersionNotFoundError(f"failed to fetch latest {kind} version")
            return versions[0]["version"]

        for entry in versions:
            if entry.get("version") == wanted:
                return wanted

        raise VersionNotFoundError(f"{kind} version {wanted} does not exist")
