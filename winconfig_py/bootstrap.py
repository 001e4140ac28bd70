"""
Orchestration of a full bootstrap run.

Select packages, install them, then (after confirmation) lay down their
configuration and link the shell profile and editor config into place.
"""

import logging
from typing import List, Optional

from winconfig_py.assemble import ConfigurationAssembler
from winconfig_py.config import Settings
from winconfig_py.engine import BasePackageManager
from winconfig_py.installer import PackageInstaller
from winconfig_py.links import link_editor_config, link_shell_profile
from winconfig_py.manifest.loader import load_manifest
from winconfig_py.manifest.models import PackageDescriptor
from winconfig_py.outcome import RunReport
from winconfig_py.prompter import Prompter
from winconfig_py.store import FileStore

logger = logging.getLogger("winconfig.bootstrap")

CONFIGURE_PROMPT = "Do you want to create initial configuration files?"
PROFILE_LINK_PROMPT = "Do you want to add a symlink to your PowerShell profile?"


class Bootstrapper:
    """Runs the bootstrap steps in order, collecting their outcomes."""

    def __init__(
        self,
        settings: Settings,
        prompter: Prompter,
        engine: BasePackageManager,
        store: Optional[FileStore] = None,
        per_package: bool = False,
    ):
        self.settings = settings
        self.prompter = prompter
        self.engine = engine
        self.store = store or FileStore(settings.templates_dir)
        self.per_package = per_package

    def load_descriptors(self) -> List[PackageDescriptor]:
        return load_manifest(self.store, self.settings.manifest_path)

    def run(self) -> RunReport:
        report = RunReport()

        descriptors = self.load_descriptors()
        selected = self.prompter.select_packages(descriptors)

        if selected:
            installer = PackageInstaller(self.engine)
            install_report = installer.install(selected, per_package=self.per_package)
            report.extend(install_report.outcomes)
        else:
            logger.info("No packages selected, skipping installation")

        if self.prompter.confirm(CONFIGURE_PROMPT):
            assembler = ConfigurationAssembler(self.settings, self.store)
            report.extend(assembler.assemble(selected, descriptors).outcomes)

        if self.prompter.confirm(PROFILE_LINK_PROMPT):
            report.add(link_shell_profile(self.settings))

        if self.settings.editor_package in selected:
            report.add(link_editor_config(self.settings))

        if report.ok:
            logger.info("Bootstrap complete")
        else:
            logger.warning(f"Bootstrap finished with {len(report.failures)} failure(s)")
        return report
