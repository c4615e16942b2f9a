"""
Lockfile persistence

The lockfile is the only record of what is installed in a server folder:
the loader configuration plus every mod/plugin in install order. Every
mutation rewrites the whole file; reads never write.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ...errors import InvalidVersionError, LockfileError, NotFoundError
from ...models import ArtifactRecord, DependencyRef, Loader, LoaderConfig
from ...utils.versioning import is_valid_server_version

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "lodestone.lock"
LOCKFILE_FORMAT_VERSION = 1
LOCKFILE_DESCRIPTION = "Generated by lodestone. DO NOT EDIT."


@dataclass
class Lockfile:
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    mods: List[ArtifactRecord] = field(default_factory=list)

    @property
    def is_initialized(self) -> bool:
        return (
            self.loader.name is not Loader.NONE
            and is_valid_server_version(self.loader.minecraft_version)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": LOCKFILE_FORMAT_VERSION,
            "description": LOCKFILE_DESCRIPTION,
            "loader": self.loader.to_dict(),
            "mods": [record.to_dict() for record in self.mods],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lockfile":
        if not isinstance(data, dict):
            raise LockfileError("lockfile must contain a JSON object")

        loader = data.get("loader", {})
        mods = data.get("mods", [])
        if not isinstance(loader, dict):
            raise LockfileError("lockfile \"loader\" section must be an object")
        if not isinstance(mods, list):
            raise LockfileError("lockfile \"mods\" section must be a list")

        return cls(
            loader=LoaderConfig.from_dict(loader),
            mods=[ArtifactRecord.from_dict(entry) for entry in mods],
        )


class LockfileStore:
    """Owns the lockfile of one server folder and writes it after every change"""

    def __init__(self, path: Path, lockfile: Optional[Lockfile] = None):
        self.path = Path(path)
        self.lockfile = lockfile or Lockfile()

    # ==================== CREATION ====================

    @classmethod
    def init(cls, server_folder: Path, lockfile_name: str = LOCKFILE_NAME) -> "LockfileStore":
        """
        Loads the lockfile of a server folder, or an empty one if none exists

        Args:
            server_folder: Path to the server folder
            lockfile_name: File name inside the server folder

        Returns:
            LockfileStore (nothing is written for a missing lockfile)
        """
        path = Path(server_folder) / lockfile_name
        if not path.exists():
            return cls(path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LockfileError(f"could not parse {path}: {e}")
        except OSError as e:
            raise LockfileError(f"could not read {path}: {e}")

        return cls(path, Lockfile.from_dict(data))

    @classmethod
    def with_params(
        cls,
        server_folder: Path,
        minecraft_version: str,
        loader: str,
        loader_version: str = "latest",
        snapshot: bool = False,
        lockfile_name: str = LOCKFILE_NAME
    ) -> "LockfileStore":
        """
        Creates a fresh lockfile for a server and writes it immediately

        Raises:
            InvalidVersionError: if minecraft_version is not a concrete version
            InvalidLoaderError: if loader is not a known loader
        """
        if not is_valid_server_version(minecraft_version):
            raise InvalidVersionError(
                f"minecraft version {minecraft_version} is invalid",
                hint="use a concrete version such as 1.20.1",
            )

        config = LoaderConfig(
            name=Loader.parse(loader),
            minecraft_version=minecraft_version,
            version=loader_version,
            snapshot=snapshot,
        )

        store = cls(Path(server_folder) / lockfile_name, Lockfile(loader=config))
        store.save()
        return store

    # ==================== QUERIES ====================

    @property
    def loader(self) -> LoaderConfig:
        return self.lockfile.loader

    @property
    def mods(self) -> List[ArtifactRecord]:
        return self.lockfile.mods

    @property
    def is_initialized(self) -> bool:
        return self.lockfile.is_initialized

    def find(self, project_id: str) -> Optional[ArtifactRecord]:
        for record in self.mods:
            if record.matches(project_id):
                return record
        return None

    def get(self, project_id: str) -> ArtifactRecord:
        record = self.find(project_id)
        if record is None:
            raise NotFoundError(f"{project_id} does not exist in the lockfile")
        return record

    def find_dependency(self, dependency: DependencyRef) -> Optional[ArtifactRecord]:
        for record in self.mods:
            if dependency.matches(record):
                return record
        return None

    # ==================== MUTATIONS ====================

    def add(self, record: ArtifactRecord) -> None:
        """Inserts record, replacing an entry with the same id or name in place"""
        for index, existing in enumerate(self.mods):
            if existing.id == record.id or existing.name.lower() == record.name.lower():
                self.mods[index] = record
                break
        else:
            self.mods.append(record)

        self.save()

    def remove(self, project_ids: Iterable[str]) -> List[ArtifactRecord]:
        """
        Removes every listed project with a single write

        Raises:
            NotFoundError: if any id is missing (nothing is removed then)
        """
        targets = [self.get(project_id) for project_id in project_ids]
        self.lockfile.mods = [record for record in self.mods if not any(record is t for t in targets)]
        self.save()
        return targets

    def save(self) -> None:
        """Serializes the lockfile and atomically replaces the file on disk"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(self.path.name + ".tmp")

        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(self.lockfile.to_dict(), f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except OSError as e:
            raise LockfileError(f"could not write {self.path}: {e}")

        logger.debug("wrote %s with %d entries", self.path, len(self.mods))


__all__ = ["Lockfile", "LockfileStore", "LOCKFILE_NAME"]
