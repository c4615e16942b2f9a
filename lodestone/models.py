"""Data models shared by the providers, the lockfile and the resolver"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse

from .errors import InvalidLoaderError, InvalidProviderError, LockfileError


class Provider(Enum):
    """Remote catalogs projects can be installed from"""

    MODRINTH = "modrinth"
    HANGAR = "hangar"

    @classmethod
    def parse(cls, name: str) -> "Provider":
        try:
            return cls(name.lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise InvalidProviderError(f"unknown provider '{name}', try one of: {valid}")


class Loader(Enum):
    """Server runtimes lodestone knows how to install"""

    NONE = "none"
    PAPER = "paper"
    FABRIC = "fabric"
    FORGE = "forge"
    NEOFORGE = "neoforge"
    VANILLA = "vanilla"

    @classmethod
    def valid_names(cls) -> List[str]:
        return [loader.value for loader in cls if loader is not cls.NONE]

    @classmethod
    def parse(cls, name: str) -> "Loader":
        """
        Converts a user supplied loader name into a Loader

        Raises:
            InvalidLoaderError: for "none" or any unknown name
        """
        normalized = (name or "").strip().lower()
        if normalized in cls.valid_names():
            return cls(normalized)
        raise InvalidLoaderError(
            f"unknown loader '{name}'",
            hint=f"try one of: {', '.join(cls.valid_names())}",
        )

    @property
    def mod_location(self) -> str:
        """Folder inside the server directory that holds add-on jars"""
        return "plugins" if self is Loader.PAPER else "mods"


@dataclass
class LoaderConfig:
    name: Loader = Loader.NONE
    minecraft_version: str = "latest"
    version: str = "latest"
    snapshot: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "minecraft_version": self.minecraft_version,
            "version": self.version,
            "snapshot": self.snapshot,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoaderConfig":
        try:
            return cls(
                name=Loader(data.get("name", "none")),
                minecraft_version=data.get("minecraft_version", "latest"),
                version=data.get("version", "latest"),
                snapshot=bool(data.get("snapshot", False)),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise LockfileError(f"invalid loader section: {e}")


@dataclass(frozen=True)
class Checksum:
    method: str
    hash: str

    def to_dict(self) -> Dict[str, str]:
        return {"method": self.method, "hash": self.hash}


@dataclass(frozen=True)
class DependencyRef:
    """A dependency declared by a project, resolved at add/remove time"""

    id: str
    name: str
    source: Provider
    required: bool

    def matches(self, record: "ArtifactRecord") -> bool:
        # ids are only comparable within one catalog
        if self.source is record.source:
            return self.id == record.id
        return self.name.lower() == record.name.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source.value,
            "required": self.required,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyRef":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            source=Provider(data["source"]),
            required=bool(data["required"]),
        )


@dataclass
class ArtifactRecord:
    """An installed (or about to be installed) mod or plugin"""

    name: str
    id: str
    version: str
    source: Provider
    download_url: str
    checksum: Optional[Checksum] = None
    dependencies: Optional[List[DependencyRef]] = field(default=None)

    @property
    def filename(self) -> str:
        return unquote(urlparse(self.download_url).path.rsplit("/", 1)[-1])

    def file_path(self, server_dir: Path, loader: Loader) -> Path:
        return Path(server_dir) / loader.mod_location / self.filename

    def matches(self, project_id: str) -> bool:
        return self.id == project_id or self.name.lower() == project_id.lower()

    def required_dependencies(self) -> List[DependencyRef]:
        return [dep for dep in self.dependencies or [] if dep.required]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "version": self.version,
            "source": self.source.value,
            "download_url": self.download_url,
            "checksum": self.checksum.to_dict() if self.checksum else None,
            "dependencies": (
                [dep.to_dict() for dep in self.dependencies]
                if self.dependencies is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtifactRecord":
        try:
            checksum = data.get("checksum")
            dependencies = data.get("dependencies")
            return cls(
                name=data["name"],
                id=str(data["id"]),
                version=data["version"],
                source=Provider(data["source"]),
                download_url=data["download_url"],
                checksum=Checksum(**checksum) if checksum else None,
                dependencies=(
                    [DependencyRef.from_dict(d) for d in dependencies]
                    if dependencies is not None else None
                ),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise LockfileError(f"invalid mod entry {data!r}: {e}")


@dataclass(frozen=True)
class LoaderArtifact:
    """Where to download a loader installer from and what to call it"""

    url: str
    filename: str
    checksum: Optional[Checksum] = None
