"""
Winget engine implementation for Windows Config Builder.

This module provides a wrapper around the Windows Package Manager CLI,
handling the subprocess calls for listing and installing packages.
"""

import logging
import shlex
import subprocess
from typing import List, Sequence, Tuple

from winconfig_py.engine import BasePackageManager
from winconfig_py.errors import SubprocessError

logger = logging.getLogger("winconfig.engine.winget")

INSTALL_FLAGS = [
    "--silent",
    "--accept-package-agreements",
    "--accept-source-agreements",
]


class WingetEngine(BasePackageManager):
    """Winget package manager implementation."""

    def __init__(self, binary_path: str = "winget"):
        """
        Initialize the winget engine.

        Args:
            binary_path: Path to the winget binary
        """
        self.binary_path = binary_path

    def _run_command(
        self, args: List[str], stream_output: bool = False
    ) -> Tuple[int, str, str]:
        """
        Run a winget command.

        Args:
            args: Command arguments
            stream_output: Let the child inherit stdout/stderr instead of
                capturing them

        Returns:
            Tuple of (return_code, stdout, stderr)

        Raises:
            SubprocessError: If the binary cannot be started.
        """
        cmd = [self.binary_path] + args
        cmd_str = " ".join(shlex.quote(str(arg)) for arg in cmd)
        logger.debug(f"Running command: {cmd_str}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=not stream_output,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except (FileNotFoundError, OSError) as e:
            raise SubprocessError(cmd_str, stderr=str(e)) from e
        return result.returncode, result.stdout or "", result.stderr or ""

    def list_installed(self) -> str:
        args = ["list"]
        returncode, stdout, stderr = self._run_command(args)
        if returncode != 0:
            raise SubprocessError(
                f"{self.binary_path} list", returncode=returncode, stderr=stderr
            )
        return stdout

    def install_command(self, package_ids: Sequence[str]) -> List[str]:
        return [self.binary_path, "install"] + INSTALL_FLAGS + list(package_ids)

    def install(self, package_ids: Sequence[str]) -> int:
        args = self.install_command(package_ids)[1:]
        try:
            returncode, _, _ = self._run_command(args, stream_output=True)
        except SubprocessError as e:
            logger.error(f"Failed to run winget install: {e}")
            return -1
        if returncode != 0:
            logger.warning(f"winget install exited with code {returncode}")
        return returncode
