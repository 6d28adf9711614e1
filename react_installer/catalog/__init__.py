"""React Installer package catalog.

A static list of commonly used React packages, searchable by text and
filterable by category, plus npm registry lookups for latest versions.
"""

from .packages import (
    ALL_CATEGORIES,
    CATEGORIES,
    PACKAGE_CATALOG,
    PackageEntry,
    filter_packages,
    find_package,
    packages_from_command,
)
from .registry import RegistryClient, RegistryResponse

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "PACKAGE_CATALOG",
    "PackageEntry",
    "filter_packages",
    "find_package",
    "packages_from_command",
    "RegistryClient",
    "RegistryResponse",
]
