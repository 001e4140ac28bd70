"""
Access to the bundled template assets.

Templates ship inside the package under ``winconfig_py/templates`` and are
read through ``importlib.resources``. A plain directory can be used instead,
which is how user overrides and tests supply their own templates.
"""

import logging
import shutil
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import List, Optional, Union

from winconfig_py.errors import FilesystemError

logger = logging.getLogger("winconfig.store")

MANIFEST_FILE = "packages.json"


class FileStore:
    """Read-only view over a tree of template files."""

    def __init__(self, root: Optional[Union[Path, Traversable]] = None):
        self.root = root if root is not None else bundled_templates()

    def _resolve(self, name: str) -> Traversable:
        node = self.root
        for part in Path(name).parts:
            node = node.joinpath(part)
        return node

    def exists(self, name: str) -> bool:
        node = self._resolve(name)
        return node.is_file() or node.is_dir()

    def read_bytes(self, name: str) -> bytes:
        """Return the contents of a template file.

        Raises:
            FilesystemError: if the file is missing or unreadable.
        """
        node = self._resolve(name)
        try:
            return node.read_bytes()
        except OSError as e:
            raise FilesystemError(name, e) from e

    def copy_tree(self, name: str, dest: Path) -> List[Path]:
        """Recursively copy the template folder *name* into *dest*.

        Existing files under *dest* are overwritten. Returns the list of files
        written.

        Raises:
            FilesystemError: if the folder is missing or a copy fails.
        """
        src = self._resolve(name)
        if not src.is_dir():
            raise FilesystemError(name, "template folder not found")

        written: List[Path] = []
        self._copy_dir(src, dest, written)
        return written

    def _copy_dir(self, src: Traversable, dest: Path, written: List[Path]) -> None:
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(dest, e) from e

        for item in sorted(src.iterdir(), key=lambda t: t.name):
            out = dest / item.name
            if item.is_dir():
                self._copy_dir(item, out, written)
                continue
            try:
                if isinstance(item, Path):
                    shutil.copyfile(item, out)
                else:
                    out.write_bytes(item.read_bytes())
            except OSError as e:
                raise FilesystemError(out, e) from e
            logger.debug(f"Copied template {item.name} to {out}")
            written.append(out)


def bundled_templates() -> Traversable:
    """Return the templates directory shipped with the package."""
    return resources.files("winconfig_py").joinpath("templates")
