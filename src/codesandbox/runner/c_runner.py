from __future__ import annotations
from pathlib import Path
from typing import List

from ..core.models import CompileOutcome
from .base import LanguageTask


class CTask(LanguageTask):
    language = "c"
    version = "gcc-4.6.3"
    default_source_name = "prog.c"

    def _compile(self, source: Path) -> CompileOutcome:
        executable = source.with_name(f"{source.name}.exe")
        argv = [
            self.toolchain.gcc,
            "-Wall", "-Werror", "-std=c99",
            "-x", "c",
            "-o", executable.name,
            source.name,
            "-lm",
        ]
        return self._toolchain_compile(argv, source, executable)

    def target_command(self) -> List[str]:
        return [f"./{self.executable_path.name}"]
