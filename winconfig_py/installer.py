"""
Idempotent package installation.

The installer asks the package manager what is already present, skips those
packages and installs the rest, batched into a single invocation by default.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from winconfig_py.engine import BasePackageManager
from winconfig_py.errors import SubprocessError
from winconfig_py.outcome import StepOutcome

logger = logging.getLogger("winconfig.installer")


@dataclass(frozen=True)
class InstalledSet:
    """Installed packages as reported by the package manager listing.

    Membership is a case-sensitive substring test against the raw listing,
    so ``"Git.Git"`` is also found inside ``"Git.Git.Extras"``.
    """

    listing: str = ""

    def __contains__(self, package_id: object) -> bool:
        return isinstance(package_id, str) and package_id in self.listing

    def __bool__(self) -> bool:
        return bool(self.listing)


class InstallStatus(Enum):
    """Per-package result of an install call."""

    SKIPPED = "skipped"
    INSTALLED = "installed"
    FAILED = "failed"
    # Batched install failed; the package manager does not say which package
    UNKNOWN = "unknown"


@dataclass
class InstallReport:
    """What an install call did."""

    already_installed: List[str] = field(default_factory=list)
    to_install: List[str] = field(default_factory=list)
    results: Dict[str, InstallStatus] = field(default_factory=dict)
    returncode: Optional[int] = None
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)


class PackageInstaller:
    """Installs the packages that are not already on the system."""

    def __init__(self, engine: BasePackageManager):
        self.engine = engine
        self._installed: Optional[InstalledSet] = None

    def load_installed_set(self) -> InstalledSet:
        """
        Query the package manager for installed packages.

        On failure the set is empty, so every requested package is treated
        as not installed.
        """
        try:
            listing = self.engine.list_installed()
        except SubprocessError as e:
            logger.error(f"❌ Failed to list installed packages: {e}")
            listing = ""
        self._installed = InstalledSet(listing)
        return self._installed

    @property
    def installed(self) -> InstalledSet:
        if self._installed is None:
            return self.load_installed_set()
        return self._installed

    def install(
        self, requested: Sequence[str], per_package: bool = False
    ) -> InstallReport:
        """
        Install the requested packages that are not already installed.

        Args:
            requested: Package identifiers in the order they were selected
            per_package: Run one package manager invocation per package to
                get an individual result for each one

        Returns:
            An ``InstallReport`` describing skipped and installed packages
        """
        report = InstallReport()
        installed = self.installed

        for package_id in requested:
            if package_id in installed:
                report.already_installed.append(package_id)
                report.results[package_id] = InstallStatus.SKIPPED
                report.outcomes.append(
                    StepOutcome.skip(
                        "install",
                        package_id,
                        f"Package {package_id} is already installed",
                    )
                )
                continue
            report.to_install.append(package_id)

        if not report.to_install:
            report.outcomes.append(
                StepOutcome.success("install", "", "All packages already installed")
            )
            return report

        if per_package:
            self._install_each(report)
        else:
            self._install_batch(report)
        return report

    def _install_batch(self, report: InstallReport) -> None:
        logger.info(f"💾 Installing {', '.join(report.to_install)}...")
        returncode = self.engine.install(report.to_install)
        report.returncode = returncode

        status = InstallStatus.INSTALLED if returncode == 0 else InstallStatus.UNKNOWN
        for package_id in report.to_install:
            report.results[package_id] = status

        subject = " ".join(report.to_install)
        if returncode == 0:
            report.outcomes.append(
                StepOutcome.success(
                    "install", subject, f"Installed {', '.join(report.to_install)}"
                )
            )
        else:
            report.outcomes.append(
                StepOutcome.failure(
                    "install",
                    subject,
                    f"Package installation exited with code {returncode}",
                )
            )

    def _install_each(self, report: InstallReport) -> None:
        failed = 0
        for package_id in report.to_install:
            logger.info(f"💾 Installing {package_id}...")
            returncode = self.engine.install([package_id])
            if returncode == 0:
                report.results[package_id] = InstallStatus.INSTALLED
                report.outcomes.append(
                    StepOutcome.success(
                        "install", package_id, f"Installed {package_id}"
                    )
                )
            else:
                failed += 1
                report.results[package_id] = InstallStatus.FAILED
                report.outcomes.append(
                    StepOutcome.failure(
                        "install",
                        package_id,
                        f"Failed to install {package_id} (exit code {returncode})",
                    )
                )
        report.returncode = 1 if failed else 0
