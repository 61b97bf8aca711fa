from __future__ import annotations


class SandboxError(Exception):
    pass


class SandboxEnvironmentError(SandboxError):
    """
    The execution environment itself is broken (missing enforcer/toolchain,
    source file that cannot be copied or renamed, unwritable workspace).
    Never a fault of the submitted code, so never shown as a compile error.
    """


class UnknownLanguageError(SandboxError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"unsupported language: {name!r}")
        self.name = name
