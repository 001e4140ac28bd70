import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson  # High-performance JSON parser

from winconfig_py.errors import FilesystemError, ManifestError
from winconfig_py.manifest.models import PackageDescriptor, SymlinkDeclaration
from winconfig_py.store import MANIFEST_FILE, FileStore

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _symlinks(value: Any) -> List[SymlinkDeclaration]:
    if not isinstance(value, list):
        return []
    links: List[SymlinkDeclaration] = []
    for entry in value:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping invalid symlink entry: {entry!r}")
            continue
        source, target = entry.get("source"), entry.get("target")
        if not isinstance(source, str) or not isinstance(target, str):
            logger.warning(f"Skipping invalid symlink entry: {entry!r}")
            continue
        links.append(SymlinkDeclaration(source=source, target=target))
    return links


def _descriptor(record: Dict[str, Any]) -> PackageDescriptor:
    icon = record.get("icon")
    description = record.get("description")
    config_folder = record.get("configFolder")
    if not isinstance(config_folder, str) or not config_folder:
        config_folder = None
    return PackageDescriptor(
        id=record["id"],
        icon=icon if isinstance(icon, str) else "",
        description=description if isinstance(description, str) else "",
        profile=_string_list(record.get("profile")),
        config_folder=config_folder,
        symlinks=_symlinks(record.get("symlinks")),
    )


def parse_manifest(data: bytes) -> List[PackageDescriptor]:
    """
    Decodes a JSON manifest into package descriptors, preserving order.

    Args:
        data: Raw manifest bytes.

    Returns:
        The descriptors in manifest order.

    Raises:
        ManifestError: If the data is not JSON, is not a list, or a record
            lacks a non-empty string ``id``.
    """
    try:
        records = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse manifest: {e}") from e

    if not isinstance(records, list):
        raise ManifestError("Manifest must be a list of package records")

    descriptors: List[PackageDescriptor] = []
    seen = set()
    for index, record in enumerate(records):
        package_id = record.get("id") if isinstance(record, dict) else None
        if not isinstance(package_id, str) or not package_id.strip():
            raise ManifestError(f"Manifest record {index} has no package id")
        if package_id in seen:
            logger.warning(f"Duplicate package id {package_id} in manifest, skipped")
            continue
        seen.add(package_id)
        descriptors.append(_descriptor(record))
    return descriptors


def read_manifest(store: FileStore, path: Optional[Path] = None) -> bytes:
    """Reads the manifest from *path* when given, otherwise from the template store."""
    try:
        if path is not None:
            return path.read_bytes()
        return store.read_bytes(MANIFEST_FILE)
    except (OSError, FilesystemError) as e:
        raise ManifestError(f"Failed to read manifest: {e}") from e


def load_manifest(
    store: FileStore, path: Optional[Path] = None
) -> List[PackageDescriptor]:
    """
    Loads the package manifest, degrading to an empty list on any error.

    Args:
        store: Template store holding the bundled ``packages.json``.
        path: Optional manifest file overriding the bundled one.

    Returns:
        The descriptors in manifest order, or an empty list if the manifest
        cannot be read or decoded.
    """
    try:
        descriptors = parse_manifest(read_manifest(store, path))
    except ManifestError as e:
        logger.error(f"❌ {e}")
        return []
    logger.debug(f"Loaded {len(descriptors)} packages from manifest")
    return descriptors
