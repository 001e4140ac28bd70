"""
Shared fixtures for the unit tests.
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence, Type

import pytest

from winconfig_py.config import Settings
from winconfig_py.engine import BasePackageManager
from winconfig_py.errors import SubprocessError
from winconfig_py.store import FileStore

MANIFEST = [
    {
        "id": "Starship.Starship",
        "icon": "S",
        "description": "Prompt",
        "profile": ["$Env:X=1", "Invoke-Expression (&starship init powershell)"],
        "configFolder": "starship",
    },
    {
        "id": "ajeetdsouza.zoxide",
        "icon": "Z",
        "description": "Smarter cd",
        "profile": ["Invoke-Expression (zoxide init)"],
    },
    {
        "id": "Neovim.Neovim",
        "icon": "N",
        "description": "Editor",
        "configFolder": "nvim",
    },
    {
        "id": "Derailed.k9s",
        "icon": "K",
        "description": "Kubernetes TUI",
        "configFolder": "k9s",
        "symlinks": [{"source": "k9s", "target": "LOCALAPPDATA"}],
    },
]

BASE_PROFILE = b"# base profile\n"


class FakeEngine(BasePackageManager):
    """In-memory package manager recording every install call."""

    def __init__(
        self,
        listing: str = "",
        fail_listing: bool = False,
        returncodes: Optional[dict] = None,
    ):
        self.listing = listing
        self.fail_listing = fail_listing
        self.returncodes = returncodes or {}
        self.list_calls = 0
        self.install_calls: List[List[str]] = []

    def list_installed(self) -> str:
        self.list_calls += 1
        if self.fail_listing:
            raise SubprocessError("winget list", returncode=1)
        return self.listing

    def install(self, package_ids: Sequence[str]) -> int:
        self.install_calls.append(list(package_ids))
        codes = [self.returncodes.get(p, 0) for p in package_ids]
        return max(codes) if codes else 0

    def install_command(self, package_ids: Sequence[str]) -> List[str]:
        return ["fake", "install"] + list(package_ids)


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    """A template tree with a manifest, base profile and config folders."""
    root = tmp_path / "templates"
    (root / "starship").mkdir(parents=True)
    (root / "nvim").mkdir()
    (root / "k9s" / "skins").mkdir(parents=True)
    (root / "packages.json").write_text(json.dumps(MANIFEST), encoding="utf-8")
    (root / "profile.ps1").write_bytes(BASE_PROFILE)
    (root / "starship" / "starship.toml").write_text("add_newline = false\n")
    (root / "nvim" / "init.lua").write_text("vim.opt.number = true\n")
    (root / "k9s" / "config.yaml").write_text("k9s: {}\n")
    (root / "k9s" / "skins" / "dark.yaml").write_text("k9s: {body: {}}\n")
    return root


@pytest.fixture
def store(templates: Path) -> FileStore:
    return FileStore(templates)


@pytest.fixture
def settings(tmp_path: Path, templates: Path) -> Settings:
    """Settings rooted in a temporary home directory."""
    home = tmp_path / "home"
    local = home / "AppData" / "Local"
    local.mkdir(parents=True)
    return Settings(
        home=home,
        config_root=home / ".config",
        local_app_data=local,
        templates_dir=templates,
        environ={"USERPROFILE": str(home), "LOCALAPPDATA": str(local)},
    )


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_engine() -> Type[FakeEngine]:
    """The fake engine class, for tests that need a custom listing or exit codes."""
    return FakeEngine
