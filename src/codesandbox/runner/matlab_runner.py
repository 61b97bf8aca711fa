from __future__ import annotations
import shutil
from pathlib import Path
from typing import List

from ..core.errors import SandboxEnvironmentError
from ..core.models import CompileOutcome
from .base import LanguageTask

BANNER_END = "For product information, visit www.mathworks.com."

# Matlab will not start under any memsize cap. Keep it at 0 for this task only.
MATLAB_MEMSIZE = 0
# Per-user ceiling shared by every concurrent Matlab run under the sandbox account.
MATLAB_NPROC = 200


class MatlabTask(LanguageTask):
    language = "matlab"
    version = "Matlab R2012"
    # used as a Matlab identifier by -r, so no extension
    default_source_name = "prog"

    def _compile(self, source: Path) -> CompileOutcome:
        executable = source.with_name(f"{source.name}.m")
        try:
            shutil.copyfile(source, executable)
        except OSError as e:
            raise SandboxEnvironmentError(f"Matlab_Task: couldn't copy source file: {e}") from e
        return CompileOutcome.success(source, executable)

    def memsize(self) -> int:
        return MATLAB_MEMSIZE

    def nproc(self) -> int:
        return MATLAB_NPROC

    def target_command(self) -> List[str]:
        return [self.toolchain.matlab, "-nojvm", "-r", self.source_path.name]

    def filter_output(self, out: str) -> str:
        """
        Drop the startup banner (everything up to the mathworks.com line),
        then blank lines at either end. Output without a banner is only trimmed.
        """
        lines = [line.rstrip() for line in out.split("\n")]
        for i, line in enumerate(lines):
            if BANNER_END in line:
                lines = lines[i + 1:]
                break

        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"
