"""
Symlink management for Windows Config Builder.

Links are always replaced: whatever sits at the link path is removed before
the new link is created, so re-running a bootstrap is safe.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Mapping, Sequence

from winconfig_py.config import Settings
from winconfig_py.errors import FilesystemError, SubprocessError
from winconfig_py.manifest.models import SymlinkDeclaration
from winconfig_py.outcome import StepOutcome
from winconfig_py.platform import profile_query_command

logger = logging.getLogger("winconfig.links")


def remove_existing(path: Path) -> None:
    """
    Remove a file, symlink or empty directory at *path* if present.

    Raises:
        FilesystemError: If something is there and cannot be removed.
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            path.rmdir()
    except OSError as e:
        raise FilesystemError(path, e) from e


def replace_symlink(link: Path, target: Path, step: str = "symlink") -> StepOutcome:
    """Create *link* pointing to *target*, replacing whatever is at *link*."""
    try:
        remove_existing(link)
    except FilesystemError as e:
        return StepOutcome.failure(
            step, str(link), f"Failed to remove existing {link}: {e.reason}"
        )

    try:
        link.symlink_to(target, target_is_directory=target.is_dir())
    except OSError as e:
        return StepOutcome.failure(
            step, str(link), f"Failed to create symlink {link} -> {target}: {e}"
        )
    return StepOutcome.success(step, str(link), f"Symlink created at {link}")


def query_profile_path(shell: str) -> Path:
    """
    Ask the shell where its profile lives.

    Raises:
        SubprocessError: If the shell cannot be run or prints nothing.
    """
    command = profile_query_command(shell)
    cmd_str = " ".join(shlex.quote(str(arg)) for arg in command)
    logger.debug(f"Querying shell profile path with command: {cmd_str}")

    try:
        result = subprocess.run(command, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        raise SubprocessError(
            cmd_str, returncode=e.returncode, stderr=e.stderr or ""
        ) from e
    except (FileNotFoundError, OSError) as e:
        raise SubprocessError(cmd_str, stderr=str(e)) from e

    profile = (result.stdout or "").strip()
    if not profile:
        raise SubprocessError(cmd_str, stderr="empty profile path")
    return Path(profile)


def link_shell_profile(settings: Settings) -> StepOutcome:
    """Point the shell's ``$PROFILE`` at the aggregated profile in the config root."""
    try:
        profile = query_profile_path(settings.shell)
    except SubprocessError as e:
        return StepOutcome.failure(
            "profile-link",
            settings.shell,
            f"Failed to execute PowerShell command: {e}",
        )

    try:
        profile.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return StepOutcome.failure(
            "profile-link", str(profile), f"Failed to create {profile.parent}: {e}"
        )

    return replace_symlink(profile, settings.profile_path, step="profile-link")


def link_editor_config(settings: Settings) -> StepOutcome:
    """Point ``%LOCALAPPDATA%/<editor>`` at ``<config root>/<editor>``."""
    link = settings.local_app_data / settings.editor
    target = settings.config_root / settings.editor
    return replace_symlink(link, target, step="editor-link")


def link_declarations(
    config_root: Path,
    declarations: Sequence[SymlinkDeclaration],
    environ: Mapping[str, str],
) -> List[StepOutcome]:
    """Create the links a package declares in the manifest, one outcome per link."""
    outcomes: List[StepOutcome] = []
    for declaration in declarations:
        link = declaration.link_path(environ)
        if link is None:
            outcomes.append(
                StepOutcome.failure(
                    "symlink",
                    declaration.source,
                    f"Environment variable {declaration.target} is not set, "
                    f"cannot link {declaration.source}",
                )
            )
            continue
        target = declaration.source_path(config_root)
        outcomes.append(replace_symlink(link, target))
    return outcomes


def environ_or_default(settings: Settings) -> Mapping[str, str]:
    """The environment used to resolve declared link targets."""
    return settings.environ or dict(os.environ)
