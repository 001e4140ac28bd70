"""
Tests for configuration assembly.
"""

import os
from pathlib import Path
from typing import List

from winconfig_py.assemble import (
    AppendProfileLines,
    ConfigurationAssembler,
    CopyFolder,
    CreateSymlinks,
    build_profile,
    compile_descriptor,
)
from winconfig_py.config import Settings
from winconfig_py.manifest.loader import load_manifest
from winconfig_py.manifest.models import PackageDescriptor, SymlinkDeclaration
from winconfig_py.store import FileStore

STARSHIP = PackageDescriptor(id="Starship.Starship", profile=["$Env:X=1"])
ZOXIDE = PackageDescriptor(
    id="ajeetdsouza.zoxide", profile=["Invoke-Expression (zoxide init)"]
)
GIT = PackageDescriptor(id="Git.Git")

ZOXIDE_BLOCK = b"# ajeetdsouza.zoxide\nInvoke-Expression (zoxide init)\n\n"
STARSHIP_BLOCK = b"# Starship.Starship\n$Env:X=1\n\n"


def _descriptors(store: FileStore) -> List[PackageDescriptor]:
    return load_manifest(store)


def test_compile_descriptor() -> None:
    descriptor = PackageDescriptor(
        id="Derailed.k9s",
        profile=["$Env:K=1"],
        config_folder="k9s",
        symlinks=[SymlinkDeclaration("k9s", "LOCALAPPDATA")],
    )
    assert compile_descriptor(descriptor) == [
        AppendProfileLines("Derailed.k9s", ("$Env:K=1",)),
        CopyFolder("Derailed.k9s", "k9s"),
        CreateSymlinks("Derailed.k9s", (SymlinkDeclaration("k9s", "LOCALAPPDATA"),)),
    ]
    assert compile_descriptor(GIT) == []


def test_profile_contains_only_selected() -> None:
    profile = build_profile(b"# base\n", ["ajeetdsouza.zoxide"], [STARSHIP, ZOXIDE])
    assert profile == b"# base\n" + ZOXIDE_BLOCK


def test_profile_follows_manifest_order() -> None:
    descriptors = [STARSHIP, GIT, ZOXIDE]
    forward = build_profile(
        b"", ["Starship.Starship", "ajeetdsouza.zoxide"], descriptors
    )
    backward = build_profile(
        b"", ["ajeetdsouza.zoxide", "Starship.Starship"], descriptors
    )
    assert forward == backward == STARSHIP_BLOCK + ZOXIDE_BLOCK


def test_profile_skips_packages_without_snippets() -> None:
    profile = build_profile(b"", ["Git.Git"], [GIT, ZOXIDE])
    assert profile == b""


def test_profile_base_gets_trailing_newline() -> None:
    profile = build_profile(b"# base", ["ajeetdsouza.zoxide"], [ZOXIDE])
    assert profile == b"# base\n" + ZOXIDE_BLOCK


def test_unknown_selection_ignored() -> None:
    assert build_profile(b"", ["Not.There"], [ZOXIDE]) == b""


def test_assemble_writes_profile(settings: Settings, store: FileStore) -> None:
    assembler = ConfigurationAssembler(settings, store)
    result = assembler.assemble(["ajeetdsouza.zoxide"], _descriptors(store))

    assert result.ok
    assert settings.config_root.is_dir()
    assert settings.profile_path.read_bytes() == b"# base profile\n" + ZOXIDE_BLOCK
    assert result.profile == settings.profile_path.read_bytes()


def test_assemble_is_idempotent(settings: Settings, store: FileStore) -> None:
    assembler = ConfigurationAssembler(settings, store)
    selection = ["Starship.Starship", "ajeetdsouza.zoxide", "Derailed.k9s"]

    first = assembler.assemble(selection, _descriptors(store))
    content = settings.profile_path.read_bytes()
    second = assembler.assemble(selection, _descriptors(store))

    assert first.ok and second.ok
    assert settings.profile_path.read_bytes() == content


def test_assemble_overwrites_existing_profile(
    settings: Settings, store: FileStore
) -> None:
    settings.config_root.mkdir(parents=True)
    settings.profile_path.write_text("stale content that is much longer " * 10)

    ConfigurationAssembler(settings, store).assemble([], _descriptors(store))
    assert settings.profile_path.read_bytes() == b"# base profile\n"


def test_assemble_copies_config_folder(settings: Settings, store: FileStore) -> None:
    result = ConfigurationAssembler(settings, store).assemble(
        ["Starship.Starship"], _descriptors(store)
    )

    assert result.ok
    copied = settings.config_root / "starship" / "starship.toml"
    assert copied.read_text() == "add_newline = false\n"
    assert [o.step for o in result.outcomes] == ["copy-folder", "profile"]


def test_assemble_missing_config_folder_is_not_fatal(
    settings: Settings, store: FileStore
) -> None:
    descriptors = [
        PackageDescriptor(id="Helix.Helix", config_folder="helix"),
        ZOXIDE,
    ]
    result = ConfigurationAssembler(settings, store).assemble(
        ["Helix.Helix", "ajeetdsouza.zoxide"], descriptors
    )

    assert not result.ok
    assert [o.subject for o in result.outcomes if not o.ok] == ["Helix.Helix"]
    assert settings.profile_path.read_bytes() == b"# base profile\n" + ZOXIDE_BLOCK


def test_assemble_creates_declared_symlinks(
    settings: Settings, store: FileStore
) -> None:
    link = settings.local_app_data / "k9s"
    link.write_text("an old file in the way")

    result = ConfigurationAssembler(settings, store).assemble(
        ["Derailed.k9s"], _descriptors(store)
    )

    assert result.ok
    assert link.is_symlink()
    assert os.readlink(link) == str(settings.config_root / "k9s")
    assert (link / "config.yaml").read_text() == "k9s: {}\n"


def test_assemble_symlink_rerun_succeeds(settings: Settings, store: FileStore) -> None:
    assembler = ConfigurationAssembler(settings, store)
    assembler.assemble(["Derailed.k9s"], _descriptors(store))
    result = assembler.assemble(["Derailed.k9s"], _descriptors(store))

    assert result.ok
    assert (settings.local_app_data / "k9s").is_symlink()


def test_assemble_symlink_unset_variable(settings: Settings, store: FileStore) -> None:
    descriptors = [
        PackageDescriptor(
            id="Some.Tool", symlinks=[SymlinkDeclaration("tool", "UNSET_VARIABLE")]
        )
    ]
    assembler = ConfigurationAssembler(settings, store)
    result = assembler.assemble(["Some.Tool"], descriptors)

    failures = [o for o in result.outcomes if not o.ok]
    assert len(failures) == 1
    assert "UNSET_VARIABLE" in failures[0].message
    assert settings.profile_path.exists()


def test_assemble_without_base_template(settings: Settings, tmp_path: Path) -> None:
    empty = tmp_path / "empty-templates"
    empty.mkdir()
    result = ConfigurationAssembler(settings, FileStore(empty)).assemble(
        ["ajeetdsouza.zoxide"], [ZOXIDE]
    )

    assert not result.ok
    assert settings.profile_path.read_bytes() == ZOXIDE_BLOCK
