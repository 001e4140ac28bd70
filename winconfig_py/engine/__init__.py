"""
Engine package for Windows Config Builder.

This module provides the base class for the package manager wrapper used by
the installer. ``winget`` is the only implementation.
"""

import abc
from typing import List, Sequence


class BasePackageManager(abc.ABC):
    """Base class for package manager engines."""

    @abc.abstractmethod
    def list_installed(self) -> str:
        """
        Return the raw listing of installed packages.

        Raises:
            SubprocessError: If the listing cannot be obtained.
        """
        pass

    @abc.abstractmethod
    def install(self, package_ids: Sequence[str]) -> int:
        """
        Install packages in a single invocation.

        The child process shares the console so progress output is visible.

        Args:
            package_ids: Identifiers to install

        Returns:
            The process exit code (negative if it could not be started)
        """
        pass

    @abc.abstractmethod
    def install_command(self, package_ids: Sequence[str]) -> List[str]:
        """Return the command list used to install *package_ids*."""
        pass
