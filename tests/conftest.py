"""Shared test fixtures."""

import copy
import hashlib
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from lodestone.config import Settings
from lodestone.errors import NotFoundError
from lodestone.managers.lockfile import LockfileStore
from lodestone.models import ArtifactRecord, Checksum, DependencyRef, Provider

MODRINTH = "https://api.modrinth.com/v2"
HANGAR = "https://hangar.papermc.io/api/v1"


class FakeResponse:
    def __init__(self, payload: bytes):
        self.payload = payload

    def iter_content(self, chunk_size: int = 1024):
        for start in range(0, len(self.payload), chunk_size):
            yield self.payload[start:start + chunk_size]


class FakeHttpClient:
    """Serves canned JSON, text and file bodies per URL; unknown URLs are 404s."""

    def __init__(self) -> None:
        self.settings = Settings(chunk_size=4)
        self.json_routes: Dict[str, Any] = {}
        self.text_routes: Dict[str, str] = {}
        self.files: Dict[str, bytes] = {}
        self.requests: List[Tuple[str, Optional[Dict[str, str]]]] = []

    def add_json(self, url: str, payload: Any) -> None:
        self.json_routes[url] = payload

    def add_text(self, url: str, body: str) -> None:
        self.text_routes[url] = body

    def add_file(self, url: str, payload: bytes) -> None:
        self.files[url] = payload

    def _lookup(self, routes: Dict[str, Any], url: str, params: Optional[Dict[str, str]]) -> Any:
        self.requests.append((url, params))
        value = routes.get(url)
        if value is None:
            raise NotFoundError(f"{url} returned 404")
        if isinstance(value, Exception):
            raise value
        return value

    def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        return copy.deepcopy(self._lookup(self.json_routes, url, params))

    def get_text(self, url: str, params: Optional[Dict[str, str]] = None) -> str:
        return self._lookup(self.text_routes, url, params).strip()

    @contextmanager
    def stream(self, url: str):
        yield FakeResponse(self._lookup(self.files, url, None))

    def requested(self, url: str) -> bool:
        return any(requested_url == url for requested_url, _ in self.requests)


@pytest.fixture
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def server_dir(tmp_path: Path) -> Path:
    path = tmp_path / "server"
    path.mkdir()
    return path


@pytest.fixture
def fabric_store(server_dir: Path) -> LockfileStore:
    return LockfileStore.with_params(server_dir, "1.20.1", "fabric", "0.15.0")


@pytest.fixture
def paper_store(server_dir: Path) -> LockfileStore:
    return LockfileStore.with_params(server_dir, "1.20.1", "paper", "latest")


def sha512(payload: bytes) -> str:
    return hashlib.sha512(payload).hexdigest()


def make_record(
    name: str,
    version: str = "v1",
    dependencies: Optional[List[DependencyRef]] = None,
    source: Provider = Provider.MODRINTH,
) -> ArtifactRecord:
    return ArtifactRecord(
        name=name,
        id=f"{name}-id",
        version=version,
        source=source,
        download_url=f"https://cdn.example.com/{name}/{version}/{name}-{version}.jar",
        checksum=Checksum(method="sha512", hash=sha512(name.encode())),
        dependencies=dependencies,
    )


def modrinth_project(
    http: FakeHttpClient,
    slug: str,
    versions: List[Dict[str, Any]],
    loaders: Optional[List[str]] = None,
    game_versions: Optional[List[str]] = None,
    server_side: str = "required",
) -> Dict[str, Any]:
    """Registers a Modrinth project, its version list and its jar files."""
    project_id = f"{slug}-id"
    project = {
        "id": project_id,
        "slug": slug,
        "server_side": server_side,
        "loaders": loaders or ["fabric"],
        "game_versions": game_versions or ["1.20.1"],
        "versions": [v["id"] for v in versions],
    }
    http.add_json(f"{MODRINTH}/project/{slug}", project)
    http.add_json(f"{MODRINTH}/project/{project_id}", project)

    listed = []
    for version in versions:
        payload = f"{slug}:{version['id']}".encode()
        filename = f"{slug}-{version['id']}.jar"
        url = f"https://cdn.modrinth.com/data/{project_id}/versions/{version['id']}/{filename}"
        info = {
            "id": version["id"],
            "project_id": project_id,
            "game_versions": version.get("game_versions", ["1.20.1"]),
            "loaders": version.get("loaders", ["fabric"]),
            "dependencies": version.get("dependencies", []),
            "files": [{
                "url": url,
                "filename": filename,
                "primary": True,
                "hashes": {"sha512": sha512(payload)},
            }],
        }
        http.add_json(f"{MODRINTH}/version/{version['id']}", info)
        http.add_file(url, payload)
        listed.append(info)

    # Modrinth lists newest first
    http.add_json(f"{MODRINTH}/project/{slug}/version", list(reversed(listed)))
    return project


def requires(slug: str, dependency_type: str = "required") -> Dict[str, Any]:
    return {"project_id": f"{slug}-id", "version_id": None, "dependency_type": dependency_type}


def hangar_project(
    http: FakeHttpClient,
    name: str,
    version: str = "1.0",
    project_id: int = 10,
    dependencies: Optional[List[Dict[str, Any]]] = None,
) -> None:
    """Registers a Hangar plugin with one PAPER release for Minecraft 1.20.1."""
    payload = f"{name}:{version}".encode()
    url = f"https://hangarcdn.papermc.io/plugins/{name}/versions/{version}/PAPER/{name}-{version}.jar"
    http.add_json(f"{HANGAR}/projects/{name}", {"id": project_id, "name": name})
    http.add_text(f"{HANGAR}/projects/{name}/latestrelease", version)
    http.add_json(f"{HANGAR}/projects/{name}/versions/{version}", {
        "name": version,
        "platformDependencies": {"PAPER": ["1.20.1"]},
        "pluginDependencies": {"PAPER": dependencies or []},
        "downloads": {"PAPER": {
            "downloadUrl": url,
            "fileInfo": {"sha256Hash": hashlib.sha256(payload).hexdigest()},
        }},
    })
    http.add_file(url, payload)
