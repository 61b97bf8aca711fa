from __future__ import annotations
from pathlib import Path
from typing import List

from ..core.models import CompileOutcome
from .base import LanguageTask


class Python2Task(LanguageTask):
    language = "python2"
    version = "Python 2.7"
    default_source_name = "prog.py"

    def _compile(self, source: Path) -> CompileOutcome:
        # nothing to build
        return CompileOutcome.success(source, source)

    def target_command(self) -> List[str]:
        # -B no .pyc, -E ignore PYTHON* env, -s no user site, -S no site module
        return [self.toolchain.python2, "-BESs", self.source_path.name]


class Python3Task(LanguageTask):
    language = "python3"
    version = "Python 3.2"
    default_source_name = "prog.py"

    def _compile(self, source: Path) -> CompileOutcome:
        """Syntax check only; the run itself still starts from source."""
        argv = [self.toolchain.python3, "-m", "py_compile", source.name]
        return self._toolchain_compile(argv, source, source)

    def target_command(self) -> List[str]:
        return [self.toolchain.python3, "-BE", self.source_path.name]
