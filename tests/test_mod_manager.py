import json
from pathlib import Path

import pytest

from lodestone.errors import (
    AlreadyInstalledError,
    ChecksumMismatchError,
    CyclicDependencyError,
    LodestoneError,
    NotFoundError,
    NotInitializedError,
)
from lodestone.managers.lockfile import LOCKFILE_NAME, LockfileStore
from lodestone.managers.mods import ModManager
from lodestone.models import Provider

from conftest import hangar_project, modrinth_project, requires


def _installed(server_dir: Path) -> list:
    data = json.loads((server_dir / LOCKFILE_NAME).read_text(encoding="utf-8"))
    return [(m["name"], m["version"]) for m in data["mods"]]


def _jars(server_dir: Path) -> list:
    return sorted(p.name for p in (server_dir / "mods").glob("*.jar"))


@pytest.fixture
def manager(http, fabric_store: LockfileStore) -> ModManager:
    return ModManager(fabric_store, http)


def test_add_installs_dependencies_before_dependent(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "fabric-api", [{"id": "F1"}])
    modrinth_project(http, "sodium", [{"id": "S1", "dependencies": [requires("fabric-api")]}])

    record = manager.add(Provider.MODRINTH, "sodium")

    assert record.name == "sodium"
    assert _installed(server_dir) == [("fabric-api", "F1"), ("sodium", "S1")]
    assert _jars(server_dir) == ["fabric-api-F1.jar", "sodium-S1.jar"]


def test_add_skip_dependencies(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "fabric-api", [{"id": "F1"}])
    modrinth_project(http, "sodium", [{"id": "S1", "dependencies": [requires("fabric-api")]}])

    manager.add(Provider.MODRINTH, "sodium", skip_dependencies=True)

    assert _installed(server_dir) == [("sodium", "S1")]


def test_optional_dependencies_need_opt_in(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "modmenu", [{"id": "MM1"}])
    modrinth_project(http, "sodium", [{"id": "S1", "dependencies": [requires("modmenu", "optional")]}])

    manager.add(Provider.MODRINTH, "sodium")
    assert _installed(server_dir) == [("sodium", "S1")]

    manager.remove("sodium")
    manager.add(Provider.MODRINTH, "sodium", include_optional=True)
    assert _installed(server_dir) == [("modmenu", "MM1"), ("sodium", "S1")]


def test_add_twice_is_rejected(http, manager: ModManager) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}])
    manager.add(Provider.MODRINTH, "lithium")

    with pytest.raises(AlreadyInstalledError):
        manager.add(Provider.MODRINTH, "lithium")
    with pytest.raises(AlreadyInstalledError):
        manager.add(Provider.MODRINTH, "lithium-id")


def test_installed_dependency_is_skipped(http, manager: ModManager, server_dir: Path, caplog) -> None:
    modrinth_project(http, "fabric-api", [{"id": "F1"}])
    modrinth_project(http, "sodium", [{"id": "S1", "dependencies": [requires("fabric-api")]}])

    manager.add(Provider.MODRINTH, "fabric-api")
    manager.add(Provider.MODRINTH, "sodium")

    assert _installed(server_dir) == [("fabric-api", "F1"), ("sodium", "S1")]
    assert "already installed" in caplog.text


def test_cycle_is_detected_and_nothing_installed(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "a", [{"id": "A1", "dependencies": [requires("b")]}])
    modrinth_project(http, "b", [{"id": "B1", "dependencies": [requires("a")]}])

    with pytest.raises(CyclicDependencyError) as excinfo:
        manager.add(Provider.MODRINTH, "a")

    assert excinfo.value.chain == ["a-id", "b-id", "a-id"]
    assert _installed(server_dir) == []


def test_failed_add_keeps_committed_dependencies(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "fabric-api", [{"id": "F1"}])
    modrinth_project(http, "sodium", [{"id": "S1", "dependencies": [requires("fabric-api")]}])
    http.files["https://cdn.modrinth.com/data/sodium-id/versions/S1/sodium-S1.jar"] = b"tampered"

    with pytest.raises(ChecksumMismatchError):
        manager.add(Provider.MODRINTH, "sodium")

    assert _installed(server_dir) == [("fabric-api", "F1")]


def test_remove_deletes_file_and_record(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}])
    manager.add(Provider.MODRINTH, "lithium")

    removed = manager.remove("lithium")

    assert [r.name for r in removed] == ["lithium"]
    assert _installed(server_dir) == []
    assert _jars(server_dir) == []


def test_remove_keep_file(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}])
    manager.add(Provider.MODRINTH, "lithium")

    manager.remove("lithium", keep_file=True)

    assert _installed(server_dir) == []
    assert _jars(server_dir) == ["lithium-L1.jar"]


def test_remove_missing_project(manager: ModManager) -> None:
    with pytest.raises(NotFoundError):
        manager.remove("ghost")


def test_remove_tolerates_missing_file(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}])
    manager.add(Provider.MODRINTH, "lithium")
    (server_dir / "mods" / "lithium-L1.jar").unlink()

    manager.remove("lithium")

    assert _installed(server_dir) == []


def test_orphans_are_kept_while_still_required(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "b", [{"id": "B1"}])
    modrinth_project(http, "a", [{"id": "A1", "dependencies": [requires("b")]}])
    modrinth_project(http, "c", [{"id": "C1", "dependencies": [requires("b")]}])
    manager.add(Provider.MODRINTH, "a")
    manager.add(Provider.MODRINTH, "c")

    removed = manager.remove("a", remove_orphans=True)
    assert [r.name for r in removed] == ["a"]
    assert _installed(server_dir) == [("b", "B1"), ("c", "C1")]

    removed = manager.remove("c", remove_orphans=True)
    assert [r.name for r in removed] == ["c", "b"]
    assert _installed(server_dir) == []
    assert _jars(server_dir) == []


def test_remove_without_orphans_keeps_dependencies(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "b", [{"id": "B1"}])
    modrinth_project(http, "a", [{"id": "A1", "dependencies": [requires("b")]}])
    manager.add(Provider.MODRINTH, "a")

    manager.remove("a")

    assert _installed(server_dir) == [("b", "B1")]


def test_update_single_project(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}, {"id": "L2"}])
    manager.add(Provider.MODRINTH, "lithium", version="L1")

    updated = manager.update("lithium")

    assert [r.version for r in updated] == ["L2"]
    assert _installed(server_dir) == [("lithium", "L2")]
    assert _jars(server_dir) == ["lithium-L2.jar"]
    assert manager.update("lithium") == []


def test_update_all(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "lithium", [{"id": "L1"}, {"id": "L2"}])
    modrinth_project(http, "ferrite", [{"id": "FC1"}])
    manager.add(Provider.MODRINTH, "lithium", version="L1")
    manager.add(Provider.MODRINTH, "ferrite")

    updated = manager.update()

    assert [r.name for r in updated] == ["lithium"]
    assert _installed(server_dir) == [("lithium", "L2"), ("ferrite", "FC1")]


def test_update_all_rejects_specific_version(manager: ModManager) -> None:
    with pytest.raises(LodestoneError):
        manager.update("all", "L1")


def test_operations_require_initialized_server(http, server_dir: Path) -> None:
    manager = ModManager(LockfileStore.init(server_dir), http)

    with pytest.raises(NotInitializedError):
        manager.add(Provider.MODRINTH, "lithium")
    with pytest.raises(NotInitializedError):
        manager.update()


def test_orphan_only_optionally_wanted_elsewhere_is_removed(http, manager: ModManager, server_dir: Path) -> None:
    modrinth_project(http, "b", [{"id": "B1"}])
    modrinth_project(http, "a", [{"id": "A1", "dependencies": [requires("b")]}])
    modrinth_project(http, "c", [{"id": "C1", "dependencies": [requires("b", "optional")]}])
    manager.add(Provider.MODRINTH, "a")
    manager.add(Provider.MODRINTH, "c")

    removed = manager.remove("a", remove_orphans=True)

    assert [r.name for r in removed] == ["a", "b"]
    assert _installed(server_dir) == [("c", "C1")]
    assert _jars(server_dir) == ["c-C1.jar"]


def _plugins(server_dir: Path) -> list:
    return sorted(p.name for p in (server_dir / "plugins").glob("*.jar"))


def test_hangar_dependency_without_project_id_is_skipped_when_installed(
    http, paper_store: LockfileStore, server_dir: Path, caplog
) -> None:
    hangar_project(http, "LuckPerms", project_id=10)
    hangar_project(http, "Addon", project_id=11, dependencies=[
        {"name": "LuckPerms", "projectId": None, "required": True},
    ])
    manager = ModManager(paper_store, http)

    manager.add(Provider.HANGAR, "LuckPerms")
    manager.add(Provider.HANGAR, "Addon")

    assert _installed(server_dir) == [("LuckPerms", "1.0"), ("Addon", "1.0")]
    assert _plugins(server_dir) == ["Addon-1.0.jar", "LuckPerms-1.0.jar"]
    assert "already installed" in caplog.text


def test_cross_provider_dependency_matches_name_case_insensitively(
    http, paper_store: LockfileStore, server_dir: Path
) -> None:
    hangar_project(http, "LuckPerms", project_id=10)
    modrinth_project(http, "luckperms", [{"id": "LP1", "loaders": ["paper"]}], loaders=["paper"])
    modrinth_project(
        http, "addon", [{"id": "AD1", "loaders": ["paper"], "dependencies": [requires("luckperms")]}],
        loaders=["paper"],
    )
    manager = ModManager(paper_store, http)

    manager.add(Provider.HANGAR, "LuckPerms")
    manager.add(Provider.MODRINTH, "addon")

    assert [name for name, _ in _installed(server_dir)] == ["LuckPerms", "addon"]
    assert _plugins(server_dir) == ["LuckPerms-1.0.jar", "addon-AD1.jar"]


def test_add_rejects_name_collision_regardless_of_case(http, paper_store: LockfileStore) -> None:
    hangar_project(http, "LuckPerms", project_id=10)
    modrinth_project(http, "luckperms", [{"id": "LP1", "loaders": ["paper"]}], loaders=["paper"])
    manager = ModManager(paper_store, http)
    manager.add(Provider.HANGAR, "LuckPerms")

    with pytest.raises(AlreadyInstalledError):
        manager.add(Provider.MODRINTH, "luckperms")
