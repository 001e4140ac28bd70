"""
Configuration assembly for Windows Config Builder.

Each selected package is compiled into a short list of instructions
(append profile lines, copy a template folder, create symlinks) which are
executed in manifest order. The profile lines are collected into a single
buffer that starts from the bundled ``profile.ps1`` template and is written
to ``<config root>/profile.ps1`` at the end.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from winconfig_py.config import PROFILE_FILE, Settings
from winconfig_py.errors import FilesystemError
from winconfig_py.links import environ_or_default, link_declarations
from winconfig_py.manifest.models import PackageDescriptor, SymlinkDeclaration
from winconfig_py.outcome import StepOutcome
from winconfig_py.store import FileStore

logger = logging.getLogger("winconfig.assemble")


@dataclass(frozen=True)
class AppendProfileLines:
    package_id: str
    lines: Tuple[str, ...]

    def render(self) -> bytes:
        """Comment header, the snippet lines verbatim, then a blank line."""
        text = f"# {self.package_id}\n" + "".join(f"{line}\n" for line in self.lines)
        return (text + "\n").encode("utf-8")


@dataclass(frozen=True)
class CopyFolder:
    package_id: str
    folder: str


@dataclass(frozen=True)
class CreateSymlinks:
    package_id: str
    declarations: Tuple[SymlinkDeclaration, ...]


Instruction = Union[AppendProfileLines, CopyFolder, CreateSymlinks]


def compile_descriptor(descriptor: PackageDescriptor) -> List[Instruction]:
    """Translate a descriptor into the instructions that configure it."""
    instructions: List[Instruction] = []
    if descriptor.profile:
        instructions.append(
            AppendProfileLines(descriptor.id, tuple(descriptor.profile))
        )
    if descriptor.config_folder:
        instructions.append(CopyFolder(descriptor.id, descriptor.config_folder))
    if descriptor.symlinks:
        instructions.append(CreateSymlinks(descriptor.id, tuple(descriptor.symlinks)))
    return instructions


def selected_descriptors(
    selected: Iterable[str], descriptors: Sequence[PackageDescriptor]
) -> List[PackageDescriptor]:
    """Return the selected descriptors in manifest order."""
    wanted = set(selected)
    return [d for d in descriptors if d.id in wanted]


def _start_buffer(base: bytes) -> bytearray:
    buffer = bytearray(base)
    if buffer and not buffer.endswith(b"\n"):
        buffer += b"\n"
    return buffer


def build_profile(
    base: bytes, selected: Iterable[str], descriptors: Sequence[PackageDescriptor]
) -> bytes:
    """
    Compose the shell profile for a selection without touching the filesystem.

    Args:
        base: Bytes of the base profile template
        selected: Selected package ids, in any order
        descriptors: All descriptors, in manifest order

    Returns:
        The profile content
    """
    buffer = _start_buffer(base)
    for descriptor in selected_descriptors(selected, descriptors):
        for instruction in compile_descriptor(descriptor):
            if isinstance(instruction, AppendProfileLines):
                buffer += instruction.render()
    return bytes(buffer)


@dataclass
class AssemblyResult:
    """The profile that was written and everything that happened on the way."""

    profile_path: Path
    profile: bytes = b""
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)


class ConfigurationAssembler:
    """Lays down profile, template folders and links for selected packages."""

    def __init__(self, settings: Settings, store: FileStore):
        self.settings = settings
        self.store = store

    def assemble(
        self, selected: Iterable[str], descriptors: Sequence[PackageDescriptor]
    ) -> AssemblyResult:
        config_root = self.settings.config_root
        result = AssemblyResult(profile_path=self.settings.profile_path)

        try:
            config_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            result.outcomes.append(
                StepOutcome.failure(
                    "config-root",
                    str(config_root),
                    f"Failed to create {config_root}: {e}",
                )
            )

        try:
            base = self.store.read_bytes(PROFILE_FILE)
        except FilesystemError as e:
            result.outcomes.append(
                StepOutcome.failure(
                    "profile", PROFILE_FILE, f"Failed to read embedded file: {e}"
                )
            )
            base = b""

        buffer = _start_buffer(base)
        for descriptor in selected_descriptors(selected, descriptors):
            logger.debug(f"Configuring {descriptor.id}")
            for instruction in compile_descriptor(descriptor):
                result.outcomes.extend(self._execute(instruction, buffer))

        result.profile = bytes(buffer)
        result.outcomes.append(self._write_profile(result.profile))
        return result

    def _execute(
        self, instruction: Instruction, buffer: bytearray
    ) -> List[StepOutcome]:
        if isinstance(instruction, AppendProfileLines):
            buffer += instruction.render()
            return []
        if isinstance(instruction, CopyFolder):
            return [self._copy_folder(instruction)]
        return link_declarations(
            self.settings.config_root,
            instruction.declarations,
            environ_or_default(self.settings),
        )

    def _copy_folder(self, instruction: CopyFolder) -> StepOutcome:
        dest = self.settings.config_root / instruction.folder
        try:
            written = self.store.copy_tree(instruction.folder, dest)
        except FilesystemError as e:
            return StepOutcome.failure(
                "copy-folder",
                instruction.package_id,
                f"Failed to copy {instruction.folder} config: {e}",
            )
        logger.debug(f"Copied {len(written)} files into {dest}")
        return StepOutcome.success(
            "copy-folder", instruction.package_id, f"Copied {instruction.folder} config"
        )

    def _write_profile(self, profile: bytes) -> StepOutcome:
        path = self.settings.profile_path
        try:
            path.write_bytes(profile)
        except OSError as e:
            return StepOutcome.failure(
                "profile", str(path), f"Failed to write {path}: {e}"
            )
        return StepOutcome.success(
            "profile", str(path), "Initial configuration files created!"
        )
