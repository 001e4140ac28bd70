"""
Windows Config Builder - bootstrap a personal development environment on Windows.

Pick the tools you want, install them with winget, and lay down their config.
"""

from importlib.metadata import version as _version

__version__ = _version("windows-config-builder")
