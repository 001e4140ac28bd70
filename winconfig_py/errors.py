"""
Error taxonomy for Windows Config Builder.

None of these are fatal to a run: they are raised close to the failing
operation, caught by the component that owns it and recorded as a failed
``StepOutcome``.
"""


class WinconfigError(Exception):
    """Base class for all Windows Config Builder errors."""


class ManifestError(WinconfigError):
    """The package manifest could not be read or decoded."""


class SubprocessError(WinconfigError):
    """A package-manager or shell invocation failed."""

    def __init__(self, command: str, returncode: int = -1, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f" (exit code {returncode})" if returncode >= 0 else ""
        if stderr:
            detail += f": {stderr.strip()}"
        super().__init__(f"Command failed: {command}{detail}")


class FilesystemError(WinconfigError):
    """Creating, writing, copying or linking a path failed."""

    def __init__(self, path: object, reason: object):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
