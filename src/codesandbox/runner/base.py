from __future__ import annotations
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import structlog

from ..core.errors import SandboxEnvironmentError
from ..core.models import CompileOutcome, ExecutionContext, Toolchain
from .limits import enforcer_flags, memsize_kb

log = structlog.get_logger()

ToolchainRunner = Callable[[List[str], Path], Tuple[int, str]]

DEFAULT_COMPILE_TIMEOUT_S = 30


def run_toolchain(argv: List[str], cwd: Path, timeout_s: int = DEFAULT_COMPILE_TIMEOUT_S) -> Tuple[int, str]:
    """
    Run a compiler and return (returncode, diagnostics).
    Diagnostics are stderr, or stdout when the tool reports there instead.
    """
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout_s,
        )
    except FileNotFoundError as e:
        raise SandboxEnvironmentError(f"toolchain not found: {argv[0]}") from e
    except subprocess.TimeoutExpired:
        return 1, f"Compilation timed out after {timeout_s}s\n"
    return proc.returncode, proc.stderr or proc.stdout or ""


class LanguageTask:
    """
    One submission in one language. Lifecycle is strictly:
      created -> compile() -> (failed | runnable) -> get_run_command()*
    """

    language: str = ""
    version: str = ""
    default_source_name: str = "prog"

    def __init__(
        self,
        context: ExecutionContext,
        source_path: Path,
        toolchain: Toolchain,
        run_toolchain: ToolchainRunner = run_toolchain,
    ):
        self.context = context
        self.toolchain = toolchain
        self._run_toolchain = run_toolchain
        self._initial_source = Path(source_path)
        self.outcome: Optional[CompileOutcome] = None

    # ---------- state ----------

    @property
    def source_path(self) -> Path:
        return self.outcome.source_path if self.outcome else self._initial_source

    @property
    def workdir(self) -> Path:
        return self.source_path.parent

    @property
    def executable_path(self) -> Optional[Path]:
        return self.outcome.executable_path if self.outcome else None

    @property
    def compile_info(self) -> str:
        return self.outcome.compile_info if self.outcome else ""

    # ---------- contract ----------

    def get_version(self) -> str:
        return self.version

    def compile(self) -> CompileOutcome:
        if self.outcome is not None:
            raise RuntimeError(f"{type(self).__name__}: compile() already ran")
        self.outcome = self._compile(self.source_path)
        log.debug("compile_done", language=self.language, ok=self.outcome.ok,
                  info=self.outcome.compile_info[:200])
        return self.outcome

    def get_run_command(self) -> List[str]:
        if self.outcome is None or not self.outcome.ok:
            raise RuntimeError(f"{type(self).__name__}: get_run_command() needs a successful compile")
        return [
            self.toolchain.enforcer,
            *enforcer_flags(self.context, memsize=self.memsize(), nproc=self.nproc()),
            *self.target_command(),
        ]

    def filter_output(self, out: str) -> str:
        return out

    # ---------- hooks for variants ----------

    def _compile(self, source: Path) -> CompileOutcome:
        raise NotImplementedError

    def target_command(self) -> List[str]:
        raise NotImplementedError

    def memsize(self) -> int:
        return memsize_kb(self.context)

    def nproc(self) -> int:
        return self.context.num_procs()

    # ---------- helpers ----------

    def _toolchain_compile(self, argv: List[str], source: Path, executable: Path) -> CompileOutcome:
        rc, diagnostics = self._run_toolchain(argv, self.workdir)
        if rc == 0:
            return CompileOutcome.success(source, executable)
        if not diagnostics.strip():
            diagnostics = f"{Path(argv[0]).name} exited with status {rc}\n"
        return CompileOutcome.failure(source, diagnostics)
