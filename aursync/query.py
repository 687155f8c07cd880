"""Package search and result rendering."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .errors import AurSyncError, NotInstalled
from .pacman import Pacman
from .rpc import AurRpcClient, Package

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SortBy(Enum):
    NAME = "name"
    SUBMITTED = "submitted"
    MODIFIED = "modified"
    VOTES = "votes"
    POPULARITY = "popularity"

    @classmethod
    def parse(cls, value: str) -> "SortBy":
        """Parse a sort key; single-letter abbreviations are accepted."""
        value = value.lower()
        for member in cls:
            if value in (member.value, member.value[0]):
                return member
        raise ValueError(f"unrecognized sort key: {value}")


class SortDir(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def parse(cls, value: str) -> "SortDir":
        value = value.lower()
        for member in cls:
            if value in (member.value, member.value[0]):
                return member
        raise ValueError(f"unrecognized sort direction: {value}")


_SORT_KEYS = {
    SortBy.NAME: lambda p: p.name,
    SortBy.SUBMITTED: lambda p: p.first_submitted,
    SortBy.MODIFIED: lambda p: p.last_modified,
    SortBy.VOTES: lambda p: p.num_votes,
    SortBy.POPULARITY: lambda p: p.popularity,
}


@dataclass
class QueryResult:
    """Packages selected for display and what was filtered out."""
    packages: List[Package] = field(default_factory=list)
    installed_versions: Dict[str, str] = field(default_factory=dict)
    skipped_outdated: int = 0
    skipped_unmaintained: int = 0


def sort_packages(packages: List[Package], sort_by: Optional[SortBy], sort_dir: SortDir = SortDir.ASCENDING) -> List[Package]:
    if sort_by is None:
        return list(packages)
    return sorted(packages, key=_SORT_KEYS[sort_by], reverse=sort_dir == SortDir.DESCENDING)


def filter_packages(packages: List[Package], keep_outdated: bool, keep_unmaintained: bool) -> QueryResult:
    result = QueryResult()
    for package in packages:
        if not keep_outdated and package.out_of_date is not None:
            result.skipped_outdated += 1
            continue
        if not keep_unmaintained and package.maintainer is None:
            result.skipped_unmaintained += 1
            continue
        result.packages.append(package)
    return result


def run_query(
    provider: AurRpcClient,
    package_manager: Pacman,
    keywords: str = "",
    field: str = "name-desc",
    installed: bool = False,
    keep_outdated: bool = False,
    keep_unmaintained: bool = False,
    sort_by: Optional[SortBy] = None,
    sort_dir: SortDir = SortDir.ASCENDING
) -> QueryResult:
    """
    Search the AUR, or list installed foreign packages, for display.

    Args:
        provider: Package-information provider
        package_manager: Used to find installed packages and their versions
        keywords: Search text
        field: Search field (see ``rpc.SEARCH_FIELDS``)
        installed: List installed foreign packages instead of searching
        keep_outdated: Keep packages flagged out of date
        keep_unmaintained: Keep packages without a maintainer
        sort_by: Sort key, or None to keep provider order
        sort_dir: Sort direction

    Returns:
        QueryResult with the packages to display
    """
    logger = logging.getLogger('aursync.query')

    foreign = package_manager.foreign_packages()
    if installed:
        packages = list(provider.info(foreign).values())
    else:
        packages = provider.search(keywords, field)
    logger.debug(f"Query returned {len(packages)} packages")

    result = filter_packages(sort_packages(packages, sort_by, sort_dir), keep_outdated, keep_unmaintained)

    foreign_set = set(foreign)
    for package in result.packages:
        if package.name not in foreign_set:
            continue
        try:
            result.installed_versions[package.name] = package_manager.installed_version(package.name)
        except NotInstalled:
            pass
        except AurSyncError as e:
            logger.warning(f"Could not read installed version of {package.name}: {e}")

    return result


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime(DATE_FORMAT)


def format_package(package: Package, aur_url: str, installed_version: Optional[str] = None, show_url: bool = True) -> str:
    """Render one package as display lines."""
    installed = f" <{installed_version}>" if installed_version else ""
    lines = [
        f"{package.name} : {package.version}{installed} : "
        f"{_format_time(package.first_submitted)} : {_format_time(package.last_modified)} : "
        f"^{package.num_votes} : {package.popularity:.2f}%"
    ]

    if show_url:
        line = f"\t<< {aur_url}/packages/{package.name} "
        if package.url:
            line += f"<- {package.url} "
        lines.append(line + ">>")

    if package.out_of_date is not None or package.maintainer is None:
        warning = "\t!! "
        if package.out_of_date is not None:
            warning += f"Out of date as of {_format_time(package.out_of_date)} "
        if package.maintainer is None:
            warning += "No Maintainer "
        lines.append(warning.rstrip())

    if package.description:
        lines.append(f"\t-- {package.description}")

    return "\n".join(lines)


def format_result(result: QueryResult, aur_url: str, show_url: bool = True) -> str:
    """Render a whole query result including the totals line."""
    blocks = [
        format_package(package, aur_url, result.installed_versions.get(package.name), show_url)
        for package in result.packages
    ]
    total = len(result.packages)
    blocks.append(f"Displaying {total} package{'' if total == 1 else 's'}.")
    if result.skipped_outdated or result.skipped_unmaintained:
        blocks.append(
            f"Skipped {result.skipped_outdated} outdated and "
            f"{result.skipped_unmaintained} unmaintained packages."
        )
    return "\n".join(blocks)
