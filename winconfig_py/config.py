"""
Configuration support for Windows Config Builder.

Settings are derived once from the environment (``%USERPROFILE%`` and
``%LOCALAPPDATA%``) and may be overridden from
``~/.config/winconfig/config.yaml`` (or ``$XDG_CONFIG_HOME/winconfig/config.yaml``).
The resulting ``Settings`` object is passed explicitly to every component.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from winconfig_py.platform import local_app_data, user_home

logger = logging.getLogger("winconfig.config")

PROFILE_FILE = "profile.ps1"


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the default settings file path.

    Uses ``$XDG_CONFIG_HOME/winconfig/config.yaml`` when set, otherwise
    falls back to ``<home>/.config/winconfig/config.yaml``.
    """
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "winconfig" / "config.yaml"
    return user_home(env) / ".config" / "winconfig" / "config.yaml"


def _expand(value: str, home: Path) -> Path:
    if value == "~" or value.startswith(("~/", "~\\")):
        return home / value[2:]
    return Path(os.path.expandvars(value))


@dataclass
class Settings:
    """Paths and tool names used throughout a run."""

    home: Path
    config_root: Path
    local_app_data: Path
    manifest_path: Optional[Path] = None
    templates_dir: Optional[Path] = None
    package_manager: str = "winget"
    shell: str = "pwsh"
    editor: str = "nvim"
    editor_package: str = "Neovim.Neovim"

    # Snapshot of the environment used to resolve symlink targets
    environ: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def profile_path(self) -> Path:
        """The aggregated shell profile written by the assembler."""
        return self.config_root / PROFILE_FILE

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables alone."""
        env = dict(os.environ if environ is None else environ)
        home = user_home(env)
        return cls(
            home=home,
            config_root=home / ".config",
            local_app_data=local_app_data(env),
            environ=env,
        )

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """Apply overrides from a parsed YAML dictionary on top of the environment."""
        settings = cls.from_environ(environ)
        if not isinstance(data, dict):
            return settings

        for key in ("config_root", "manifest", "templates"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                logger.warning(f"Ignoring non-string value for {key}: {value!r}")
                continue
            path = _expand(value, settings.home)
            if key == "config_root":
                settings.config_root = path
            elif key == "manifest":
                settings.manifest_path = path
            else:
                settings.templates_dir = path

        for key in ("package_manager", "shell", "editor", "editor_package"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                logger.warning(f"Ignoring invalid value for {key}: {value!r}")
                continue
            setattr(settings, key, value)

        return settings

    @classmethod
    def from_file(
        cls, path: Path, environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """Read a YAML file and return ``Settings``.

        Falls back to environment-only settings on any error.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f.read())
            if data is None:
                return cls.from_environ(environ)
            return cls.from_dict(data, environ)
        except (IOError, yaml.YAMLError) as e:
            logger.error(f"Failed to load settings from {path}: {e}")
            return cls.from_environ(environ)

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Main entry point: load settings from *config_path* or the default location.

        Returns environment-only settings if the file does not exist.
        """
        path = config_path or default_config_path(environ)
        if not path.exists():
            return cls.from_environ(environ)
        return cls.from_file(path, environ)
