"""
Command-line interface for Windows Config Builder.

This module provides the command-line entry point for bootstrapping a
development environment: selecting and installing packages and laying down
their configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated, List, Optional

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from winconfig_py import __version__
from winconfig_py.assemble import ConfigurationAssembler
from winconfig_py.bootstrap import Bootstrapper
from winconfig_py.config import Settings
from winconfig_py.engine.winget import WingetEngine
from winconfig_py.installer import PackageInstaller
from winconfig_py.links import link_editor_config, link_shell_profile
from winconfig_py.manifest.loader import load_manifest
from winconfig_py.outcome import RunReport
from winconfig_py.prompter import RichPrompter, SplitPrompter, StaticPrompter
from winconfig_py.store import FileStore

# Set up the console and logger
console = Console()
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
)
logger = logging.getLogger("winconfig")

# Create the Typer app
app = typer.Typer(
    help="Bootstrap a Windows development environment with winget.",
    add_completion=False,
)


def get_settings(ctx: typer.Context) -> Settings:
    """Return the settings loaded by the callback, loading defaults if absent."""
    if isinstance(ctx.obj, Settings):
        return ctx.obj
    ctx.obj = Settings.load()
    return ctx.obj


def log_error(message: str) -> None:
    """Log an error message to both logger and console."""
    logger.error(message)
    console.print(f"[red]{message}[/red]")
    return None


def print_report(report: RunReport) -> None:
    """Print a summary of a run and exit non-zero if anything failed."""
    if not report.outcomes:
        console.print("Nothing to do.")
        return

    table = Table(title="Summary")
    table.add_column("", width=2)
    table.add_column("Step", style="cyan")
    table.add_column("Result")
    for outcome in report:
        table.add_row(outcome.marker, outcome.step, outcome.message)
    console.print(table)

    if not report.ok:
        console.print(f"[red]{len(report.failures)} step(s) failed[/red]")
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output."
    ),
    json: bool = typer.Option(False, "--json", help="Output logs in JSON format."),
    version: bool = typer.Option(
        False, "--version", help="Show the application version and exit."
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the settings file. Defaults to ~/.config/winconfig/config.yaml.",
    ),
) -> None:
    """
    Windows Config Builder: pick your tools, install them, configure them.
    """
    if version:
        console.print(f"Windows Config Builder version: {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    # Configure logging level based on verbosity
    if verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    # Configure JSON logging if requested
    if json:
        for handler in list(logging.root.handlers):
            logging.root.removeHandler(handler)
        logging.basicConfig(
            level=logging.INFO if not verbose else logging.DEBUG,
            format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"message": "%(message)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S",
            stream=sys.stdout,
        )
        logger.debug("JSON logging enabled")

    if config is not None and not config.exists():
        log_error(f"Settings file not found: {config}")
        raise typer.Exit(1)

    ctx.obj = Settings.load(config)
    logger.debug(f"Config root: {ctx.obj.config_root}")


@app.command()
def setup(
    ctx: typer.Context,
    packages: Annotated[
        Optional[List[str]],
        typer.Option(
            "--package",
            "-p",
            help="Package id to select. Skips the interactive selection.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Answer yes to every confirmation."),
    ] = False,
    per_package: Annotated[
        bool,
        typer.Option(
            "--per-package",
            help="Install packages one at a time to get a result for each.",
        ),
    ] = False,
) -> None:
    """
    Select packages, install them and create their configuration.
    """
    settings = get_settings(ctx)

    interactive = RichPrompter(console)
    prompter = SplitPrompter(
        selector=StaticPrompter(packages) if packages else interactive,
        confirmer=StaticPrompter([], answer=True) if yes else interactive,
    )

    bootstrapper = Bootstrapper(
        settings,
        prompter,
        WingetEngine(settings.package_manager),
        per_package=per_package,
    )
    print_report(bootstrapper.run())


@app.command(name="packages")
def list_packages(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False, "--json", help="Output the package list as JSON."
    ),
) -> None:
    """
    List the packages available in the manifest.
    """
    settings = get_settings(ctx)
    store = FileStore(settings.templates_dir)
    descriptors = load_manifest(store, settings.manifest_path)

    if json_output:
        data = [
            {
                "id": d.id,
                "icon": d.icon,
                "description": d.description,
                "profile": d.profile,
                "configFolder": d.config_folder,
                "symlinks": [
                    {"source": s.source, "target": s.target} for s in d.symlinks
                ],
            }
            for d in descriptors
        ]
        typer.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8"))
        return

    if not descriptors:
        console.print("No packages found.")
        return

    table = Table(title="Packages")
    table.add_column("", width=2)
    table.add_column("ID", style="cyan")
    table.add_column("Description")
    table.add_column("Configures", style="green")
    for d in descriptors:
        configures = []
        if d.profile:
            configures.append("profile")
        if d.config_folder:
            configures.append(d.config_folder)
        if d.symlinks:
            configures.append("symlinks")
        table.add_row(d.icon, d.id, d.description, ", ".join(configures))
    console.print(table)


@app.command()
def install(
    ctx: typer.Context,
    package_ids: Annotated[
        List[str], typer.Argument(help="Package ids to install.")
    ],
    per_package: Annotated[
        bool,
        typer.Option(
            "--per-package",
            help="Install packages one at a time to get a result for each.",
        ),
    ] = False,
) -> None:
    """
    Install packages with winget, skipping those already installed.
    """
    settings = get_settings(ctx)
    installer = PackageInstaller(WingetEngine(settings.package_manager))
    report = RunReport()
    report.extend(installer.install(package_ids, per_package=per_package).outcomes)
    print_report(report)


@app.command()
def configure(
    ctx: typer.Context,
    package_ids: Annotated[
        List[str], typer.Argument(help="Package ids to create configuration for.")
    ],
) -> None:
    """
    Create the shell profile and config files for the given packages.
    """
    settings = get_settings(ctx)
    store = FileStore(settings.templates_dir)
    descriptors = load_manifest(store, settings.manifest_path)

    known = {d.id for d in descriptors}
    for package_id in package_ids:
        if package_id not in known:
            logger.warning(f"Package {package_id} is not in the manifest")

    result = ConfigurationAssembler(settings, store).assemble(package_ids, descriptors)
    report = RunReport()
    report.extend(result.outcomes)
    print_report(report)


@app.command()
def link(
    ctx: typer.Context,
    what: Annotated[
        str, typer.Argument(help="Which link to create: 'profile' or 'editor'.")
    ],
) -> None:
    """
    Link the PowerShell profile or the editor config into place.
    """
    settings = get_settings(ctx)
    report = RunReport()
    if what == "profile":
        report.add(link_shell_profile(settings))
    elif what == "editor":
        report.add(link_editor_config(settings))
    else:
        log_error(f"Unknown link '{what}'. Use 'profile' or 'editor'.")
        raise typer.Exit(2)
    print_report(report)


@app.command()
def version() -> None:
    """Show the application version and exit."""
    console.print(f"Windows Config Builder version: {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
