"""
Windows environment helpers for Windows Config Builder.

Centralizes the environment variables and shell invocations the rest of the
codebase relies on, so tests can pass an explicit environment mapping instead
of patching ``os.environ``.
"""

import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

HOME_VAR = "USERPROFILE"
LOCAL_APP_DATA_VAR = "LOCALAPPDATA"


def is_windows() -> bool:
    """Return True when running on Windows."""
    return sys.platform == "win32"


def user_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the user's home directory.

    Reads ``%USERPROFILE%`` and falls back to ``Path.home()`` when it is unset.
    """
    env = os.environ if environ is None else environ
    home = env.get(HOME_VAR)
    if home:
        return Path(home)
    return Path.home()


def local_app_data(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return ``%LOCALAPPDATA%``, defaulting to ``<home>/AppData/Local``."""
    env = os.environ if environ is None else environ
    local = env.get(LOCAL_APP_DATA_VAR)
    if local:
        return Path(local)
    return user_home(env) / "AppData" / "Local"


def profile_query_command(shell: str) -> List[str]:
    """Return the command list that echoes the shell's ``$PROFILE`` path."""
    return [shell, "-NoProfile", "-Command", "echo $PROFILE"]
