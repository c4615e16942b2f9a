"""Command line interface for lodestone"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Settings, default_server_dir
from .core.api.client import HttpClient
from .errors import LodestoneError
from .managers.server import ServerManager
from .models import Loader, LoaderConfig, Provider


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lodestone",
        description="Reproducible Minecraft server setup from a lockfile",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show progress messages")
    parser.add_argument("--dir", type=Path, default=None, help="Server directory (default: $LODESTONE_HOME or cwd)")

    commands = parser.add_subparsers(dest="command", metavar="<command>")
    commands.required = True

    # loader
    loader_parser = commands.add_parser("loader", help="Download server loaders")
    loader_commands = loader_parser.add_subparsers(dest="action", metavar="<action>")
    loader_commands.required = True

    fetch_parser = loader_commands.add_parser("fetch", help="Download a loader jar into the server directory")
    fetch_parser.add_argument("-n", "--name", required=True, help="Loader name")
    fetch_parser.add_argument("-m", "--minecraft-version", default="latest", help="Minecraft version")
    fetch_parser.add_argument("-l", "--loader-version", default="latest", help="Loader version")
    fetch_parser.add_argument("--snapshot", action="store_true", help="Allow snapshot versions (vanilla)")
    fetch_parser.set_defaults(handler=cmd_loader_fetch)

    list_loaders = loader_commands.add_parser("list", help="List supported loaders")
    list_loaders.set_defaults(handler=cmd_loader_list)

    # server
    server_parser = commands.add_parser("server", help="Create or reinstall a server")
    server_commands = server_parser.add_subparsers(dest="action", metavar="<action>")
    server_commands.required = True

    init_parser = server_commands.add_parser("init", help="Create a lockfile and download the loader")
    init_parser.add_argument("-m", "--minecraft-version", required=True, help="Minecraft version")
    init_parser.add_argument("-l", "--loader", required=True, help="Loader name")
    init_parser.add_argument("--loader-version", default="latest", help="Loader version")
    init_parser.add_argument("--snapshot", action="store_true", help="Allow snapshot versions (vanilla)")
    init_parser.set_defaults(handler=cmd_server_init)

    install_parser = server_commands.add_parser("install", help="Download everything listed in the lockfile")
    install_parser.set_defaults(handler=cmd_server_install)

    sign_parser = server_commands.add_parser("sign", help="Accept the Minecraft EULA")
    sign_parser.set_defaults(handler=cmd_server_sign)

    # mod
    mod_parser = commands.add_parser("mod", help="Manage mods and plugins")
    mod_commands = mod_parser.add_subparsers(dest="action", metavar="<action>")
    mod_commands.required = True

    add_parser = mod_commands.add_parser("add", help="Install a project and its dependencies")
    add_parser.add_argument("project_id", help="Project id or slug")
    add_parser.add_argument("-p", "--provider", default=Provider.MODRINTH.value,
                            choices=[p.value for p in Provider], help="Catalog to install from")
    add_parser.add_argument("-V", "--project-version", default="latest", help="Project version")
    add_parser.add_argument("--no-deps", action="store_true", help="Do not install dependencies")
    add_parser.add_argument("--optional", action="store_true", help="Also install optional dependencies")
    add_parser.set_defaults(handler=cmd_mod_add)

    remove_parser = mod_commands.add_parser("remove", help="Uninstall a project")
    remove_parser.add_argument("project_id", help="Project id or slug")
    remove_parser.add_argument("--keep-file", action="store_true", help="Leave the jar on disk")
    remove_parser.add_argument("--orphans", action="store_true", help="Also remove dependencies nothing else needs")
    remove_parser.set_defaults(handler=cmd_mod_remove)

    update_parser = mod_commands.add_parser("update", help="Update one project or all of them")
    update_parser.add_argument("project_id", nargs="?", default="all", help="Project id or slug (default: all)")
    update_parser.add_argument("-V", "--project-version", default="latest", help="Project version")
    update_parser.set_defaults(handler=cmd_mod_update)

    list_mods = mod_commands.add_parser("list", help="List installed projects")
    list_mods.set_defaults(handler=cmd_mod_list)

    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def _echo(message: str) -> None:
    print(message, end="" if message.endswith("\n") else "\n")


# ==================== HANDLERS ====================

def cmd_loader_fetch(args: argparse.Namespace, server: ServerManager) -> int:
    config = LoaderConfig(
        name=Loader.parse(args.name),
        minecraft_version=args.minecraft_version,
        version=args.loader_version,
        snapshot=args.snapshot,
    )
    server.server_folder.mkdir(parents=True, exist_ok=True)
    path = server.loader_manager.fetch(config, server.server_folder, log_callback=_echo)
    print(f"saved {path}")
    return 0


def cmd_loader_list(args: argparse.Namespace, server: ServerManager) -> int:
    for name in Loader.valid_names():
        print(name)
    return 0


def cmd_server_init(args: argparse.Namespace, server: ServerManager) -> int:
    server.init(
        args.minecraft_version,
        args.loader,
        loader_version=args.loader_version,
        snapshot=args.snapshot,
        log_callback=_echo,
    )
    return 0


def cmd_server_install(args: argparse.Namespace, server: ServerManager) -> int:
    server.install(log_callback=_echo)
    return 0


def cmd_server_sign(args: argparse.Namespace, server: ServerManager) -> int:
    server.sign_eula(log_callback=_echo)
    return 0


def cmd_mod_add(args: argparse.Namespace, server: ServerManager) -> int:
    record = server.mod_manager().add(
        Provider.parse(args.provider),
        args.project_id,
        version=args.project_version,
        include_optional=args.optional,
        skip_dependencies=args.no_deps,
    )
    print(f"added {record.name} {record.version}")
    return 0


def cmd_mod_remove(args: argparse.Namespace, server: ServerManager) -> int:
    removed = server.mod_manager().remove(
        args.project_id,
        keep_file=args.keep_file,
        remove_orphans=args.orphans,
    )
    for record in removed:
        print(f"removed {record.name}")
    return 0


def cmd_mod_update(args: argparse.Namespace, server: ServerManager) -> int:
    updated = server.mod_manager().update(args.project_id, version=args.project_version)
    if not updated:
        print("everything is up to date")
    for record in updated:
        print(f"updated {record.name} to {record.version}")
    return 0


def cmd_mod_list(args: argparse.Namespace, server: ServerManager) -> int:
    store = server.load_store()
    for record in store.mods:
        print(f"{record.name} {record.version} ({record.source.value})")
    return 0


# ==================== ENTRY POINT ====================

def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load()
        server = ServerManager(args.dir or default_server_dir(), HttpClient(settings), settings)
        return args.handler(args, server)
    except LodestoneError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
