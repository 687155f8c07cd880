"""Command-line interface for aursync."""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .builder import MakepkgBuilder
from .cache import clean_cache
from .config import Config, load_configuration, validate_configuration
from .confirm import AlwaysConfirm, TerminalConfirmation
from .errors import AurSyncError
from .pacman import Pacman
from .platform import validate_git_availability
from .query import SortBy, SortDir, format_result, run_query
from .rpc import SEARCH_FIELDS, AurRpcClient
from .sync import SyncOrchestrator, SyncRequest


def setup_logging(config: Config) -> None:
    """Configure logging for the aursync loggers."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    formatter = StructuredFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger('aursync')
    logger.setLevel(getattr(logging, config.log_level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aursync", description="Manage AUR packages")
    parser.add_argument("-l", "--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="output logging level")
    parser.add_argument("-c", "--cache-dir", default=None,
                        help="package cache directory (default: $AUR_CACHE_DIR)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    install = subparsers.add_parser("install", help="install or upgrade packages")
    install.add_argument("-d", "--as-deps", action="store_true", help="install packages as dependencies")
    install.add_argument("--no-refresh", dest="refresh", action="store_false",
                         help="do not pull cached package sources")
    install.add_argument("-u", "--upgrade", action="store_true", help="rebuild packages even when unchanged")
    install.add_argument("-s", "--sync-deps", action="store_true", help="install missing dependencies with pacman")
    install.add_argument("-r", "--rm-deps", action="store_true",
                         help="remove build dependencies after a successful install")
    install.add_argument("-c", "--clean", action="store_true", help="clean build dir after a successful install")
    install.add_argument("--no-confirm", action="store_true", help="skip confirmation")
    install.add_argument("--deps", nargs="+", default=[], help="extra packages to install as dependencies")
    install.add_argument("-e", "--ignore-errors", action="store_true", help="ignore errors in individual packages")
    install.add_argument("--make-explicit", action="store_true",
                         help="treat packages installed as dependencies as explicit")
    install.add_argument("packages", nargs="*", help="package names, or * for all foreign packages")

    clean = subparsers.add_parser("clean", help="clean package cache")
    clean.add_argument("-u", "--only-uninstalled", action="store_true",
                       help="clean only packages that aren't currently installed")
    clean.add_argument("-y", "--no-confirm", action="store_true", help="skip delete confirmation")
    clean.add_argument("-i", "--ignore-errors", action="store_true", help="continue through errors")

    query = subparsers.add_parser("query", help="search for packages")
    query.add_argument("-f", "--field", default="name-desc", choices=SEARCH_FIELDS, help="field by which to search")
    query.add_argument("-o", "--keep-outdated", action="store_true", help="display out of date packages")
    query.add_argument("-u", "--keep-unmaintained", action="store_true", help="display unmaintained packages")
    query.add_argument("--no-url", action="store_true", help="skip displaying package urls")
    query.add_argument("-s", "--sort-by", nargs="?", const=SortBy.NAME, default=None, type=SortBy.parse,
                       help="sort packages by name, submitted, modified, votes or popularity")
    query.add_argument("--sort-dir", default="ascending", type=SortDir.parse,
                       help="direction in which to order sorting")
    query.add_argument("-i", "--installed", action="store_true", help="query only installed packages")
    query.add_argument("-k", "--keywords", default="", help="text for which to search")

    return parser


def _load_config(args: argparse.Namespace) -> Config:
    config = load_configuration()
    overrides = {}
    if args.cache_dir:
        overrides["cache_dir"] = args.cache_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    if not overrides:
        return config
    return replace(config, **overrides)


def _install(args: argparse.Namespace, config: Config, pacman: Pacman, provider: AurRpcClient) -> int:
    available, error = validate_git_availability()
    if not available:
        logging.getLogger('aursync.cli').error(error)
        return 1

    confirmation = AlwaysConfirm() if args.no_confirm else TerminalConfirmation()
    orchestrator = SyncOrchestrator(config, pacman, provider, MakepkgBuilder(), confirmation)
    request = SyncRequest(
        packages=args.packages,
        deps=args.deps,
        as_deps=args.as_deps,
        refresh=args.refresh,
        upgrade=args.upgrade,
        sync_deps=args.sync_deps,
        rm_deps=args.rm_deps,
        clean=args.clean,
        no_confirm=args.no_confirm,
        ignore_errors=args.ignore_errors,
        make_explicit=args.make_explicit,
    )
    report = orchestrator.run(request)
    if report.cancelled:
        return 0

    for name, error in report.failed:
        print(f"failed: {name}: {error}")
    print(report.summary())
    return 0 if report.success else 1


def _clean(args: argparse.Namespace, config: Config, pacman: Pacman, provider: AurRpcClient) -> int:
    confirmation = AlwaysConfirm() if args.no_confirm else TerminalConfirmation()
    deleted = clean_cache(
        config.cache_dir,
        provider,
        pacman,
        confirmation,
        only_uninstalled=args.only_uninstalled,
        ignore_errors=args.ignore_errors,
    )
    print(f"Deleted {deleted} cache director{'y' if deleted == 1 else 'ies'}.")
    return 0


def _query(args: argparse.Namespace, config: Config, pacman: Pacman, provider: AurRpcClient) -> int:
    result = run_query(
        provider,
        pacman,
        keywords=args.keywords,
        field=args.field,
        installed=args.installed,
        keep_outdated=args.keep_outdated,
        keep_unmaintained=args.keep_unmaintained,
        sort_by=args.sort_by,
        sort_dir=args.sort_dir,
    )
    print(format_result(result, config.aur_url, show_url=not args.no_url))
    return 0


COMMANDS = {
    "install": _install,
    "clean": _clean,
    "query": _query,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the aursync command."""
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config)
    logger = logging.getLogger('aursync.cli')
    logger.debug(f"AUR Cache Dir: {config.cache_dir}")

    for issue in validate_configuration(config):
        if issue.startswith("ERROR"):
            logger.error(issue)
            return 2
        logger.warning(issue)

    pacman = Pacman()
    provider = AurRpcClient(config.aur_url, timeout=config.request_timeout)

    try:
        return COMMANDS[args.command](args, config, pacman, provider)
    except AurSyncError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
