"""Descriptor types decoded from the package manifest."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional


@dataclass(frozen=True)
class SymlinkDeclaration:
    """A link to create for a package.

    The link lives at ``<$target>/<source>`` and points to
    ``<config root>/<source>``.
    """

    source: str
    # Name of the environment variable holding the directory the link goes in
    target: str

    def link_path(self, environ: Mapping[str, str]) -> Optional[Path]:
        """Return where the link is created, or None if ``target`` is unset."""
        directory = environ.get(self.target)
        if not directory:
            return None
        return Path(directory) / self.source

    def source_path(self, config_root: Path) -> Path:
        return config_root / self.source


@dataclass(frozen=True)
class PackageDescriptor:
    """A selectable package and the configuration it brings along."""

    id: str
    icon: str = ""
    description: str = ""
    profile: List[str] = field(default_factory=list)
    config_folder: Optional[str] = None
    symlinks: List[SymlinkDeclaration] = field(default_factory=list)

    @property
    def has_configuration(self) -> bool:
        return bool(self.profile or self.config_folder or self.symlinks)


def option_label(descriptor: PackageDescriptor) -> str:
    """Render the menu label shown for a package."""
    return f"{descriptor.icon} {descriptor.id:<30} {descriptor.description}"
