"""
User prompts for package selection and confirmations.
"""

import logging
import re
from typing import List, Optional, Protocol, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from winconfig_py.manifest.models import PackageDescriptor, option_label

logger = logging.getLogger("winconfig.prompter")


class Prompter(Protocol):
    """Source of the user's choices during a run."""

    def select_packages(self, descriptors: Sequence[PackageDescriptor]) -> List[str]:
        ...

    def confirm(self, message: str) -> bool:
        ...


def parse_selection(answer: str, count: int) -> List[int]:
    """
    Parse a selection such as ``"1, 3 5-7"`` or ``"all"`` into zero-based indexes.

    Out-of-range or malformed tokens are logged and ignored.
    """
    answer = answer.strip().lower()
    if answer in ("all", "*"):
        return list(range(count))

    chosen: List[int] = []
    for token in re.split(r"[,\s]+", answer):
        if not token:
            continue
        match = re.fullmatch(r"(\d+)(?:-(\d+))?", token)
        if not match:
            logger.warning(f"Ignoring invalid selection: {token}")
            continue
        start = int(match.group(1))
        end = int(match.group(2) or start)
        for number in range(start, end + 1):
            if not 1 <= number <= count:
                logger.warning(f"Ignoring out of range selection: {number}")
                continue
            if number - 1 not in chosen:
                chosen.append(number - 1)
    return sorted(chosen)


class RichPrompter:
    """Interactive prompter rendering the package list as a table."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def select_packages(self, descriptors: Sequence[PackageDescriptor]) -> List[str]:
        if not descriptors:
            self.console.print("[yellow]No packages available to select.[/yellow]")
            return []

        table = Table(title="Select packages to install")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Package")
        for number, descriptor in enumerate(descriptors, start=1):
            table.add_row(str(number), option_label(descriptor))
        self.console.print(table)

        answer = Prompt.ask(
            "Packages (numbers or ranges, 'all', empty for none)",
            default="",
            console=self.console,
            show_default=False,
        )
        return [descriptors[i].id for i in parse_selection(answer, len(descriptors))]

    def confirm(self, message: str) -> bool:
        return Confirm.ask(message, console=self.console)


class StaticPrompter:
    """Prompter with pre-set answers, for non-interactive runs."""

    def __init__(self, selection: Sequence[str], answer: bool = True):
        self.selection = list(selection)
        self.answer = answer

    def select_packages(self, descriptors: Sequence[PackageDescriptor]) -> List[str]:
        known = {d.id for d in descriptors}
        for package_id in self.selection:
            if package_id not in known:
                logger.warning(f"Package {package_id} is not in the manifest, ignoring")
        return [package_id for package_id in self.selection if package_id in known]

    def confirm(self, message: str) -> bool:
        logger.debug(f"{message} -> {'yes' if self.answer else 'no'}")
        return self.answer


class SplitPrompter:
    """Takes the package selection from one prompter and confirmations from another."""

    def __init__(self, selector: Prompter, confirmer: Prompter):
        self.selector = selector
        self.confirmer = confirmer

    def select_packages(self, descriptors: Sequence[PackageDescriptor]) -> List[str]:
        return self.selector.select_packages(descriptors)

    def confirm(self, message: str) -> bool:
        return self.confirmer.confirm(message)
