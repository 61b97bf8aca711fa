from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

# Exit status of a submission that never ran, or was killed on the deadline.
NO_EXIT_STATUS = -1


class Status(str, Enum):
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    COMPILE_ERROR = "COMPILE_ERROR"
    TIMEOUT = "TIMEOUT"


def _check_int(name: str, value: Any, minimum: int) -> None:
    # bool is an int subclass; a True cputime is a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class Limits:
    """
    Resource ceilings for one invocation.
    memory_mb / disk_mb are in the caller's unit; tasks render them for the enforcer.
    """
    cpu_seconds: int = 5
    memory_mb: int = 100
    disk_mb: int = 10
    num_procs: int = 10

    def __post_init__(self):
        _check_int("cpu_seconds", self.cpu_seconds, 1)
        _check_int("memory_mb", self.memory_mb, 0)
        _check_int("disk_mb", self.disk_mb, 0)
        _check_int("num_procs", self.num_procs, 1)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Limits":
        data = data or {}
        base = cls()
        return cls(
            cpu_seconds=data.get("cpu_seconds", base.cpu_seconds),
            memory_mb=data.get("memory_mb", base.memory_mb),
            disk_mb=data.get("disk_mb", base.disk_mb),
            num_procs=data.get("num_procs", base.num_procs),
        )


@dataclass(frozen=True)
class ExecutionContext:
    """The sandbox a task runs in: who runs it and under which limits."""
    run_as_user: str
    limits: Limits = field(default_factory=Limits)

    # question-level parameter names -> Limits field
    _PARAMS = {
        "cputime": "cpu_seconds",
        "memorylimit": "memory_mb",
        "disklimit": "disk_mb",
        "numprocs": "num_procs",
    }

    def cpu_time(self) -> int:
        return self.limits.cpu_seconds

    def memory_limit(self) -> int:
        return self.limits.memory_mb

    def disk_limit(self) -> int:
        return self.limits.disk_mb

    def num_procs(self) -> int:
        return self.limits.num_procs

    def get_param(self, name: str) -> int:
        try:
            return getattr(self.limits, self._PARAMS[name])
        except KeyError:
            raise KeyError(f"unknown sandbox parameter: {name}") from None


@dataclass(frozen=True)
class Toolchain:
    """Paths of the enforcer and of every compiler/interpreter a task may call."""
    enforcer: str = "/usr/local/bin/runguard"
    python2: str = "/usr/bin/python2"
    python3: str = "/usr/bin/python3"
    java: str = "/usr/bin/java"
    javac: str = "/usr/bin/javac"
    gcc: str = "gcc"
    matlab: str = "/usr/local/bin/matlab_exec_cli"

    @classmethod
    def from_mapping(cls, enforcer: Optional[str], runtimes: Optional[Mapping[str, Any]]) -> "Toolchain":
        known = {k: str(v) for k, v in (runtimes or {}).items() if k in cls.__dataclass_fields__ and v}
        if enforcer:
            known["enforcer"] = str(enforcer)
        return cls(**known)


@dataclass(frozen=True)
class CompileOutcome:
    """
    Result of one compile step. executable_path is set iff compile_info == "".
    A renamed source (Java) shows up as a new source_path here.
    """
    source_path: Path
    executable_path: Optional[Path] = None
    compile_info: str = ""

    @property
    def ok(self) -> bool:
        return self.executable_path is not None

    @classmethod
    def success(cls, source_path: Path, executable_path: Path) -> "CompileOutcome":
        return cls(source_path=source_path, executable_path=executable_path, compile_info="")

    @classmethod
    def failure(cls, source_path: Path, compile_info: str) -> "CompileOutcome":
        if not compile_info:
            raise ValueError("a failed compile needs a diagnostic")
        return cls(source_path=source_path, executable_path=None, compile_info=compile_info)


@dataclass(frozen=True)
class ExecutionResult:
    compile_info: str
    stdout: str
    stderr: str
    exit_status: int
    timed_out: bool = False
    duration_s: float = 0.0

    @classmethod
    def not_run(cls, compile_info: str) -> "ExecutionResult":
        return cls(compile_info=compile_info, stdout="", stderr="", exit_status=NO_EXIT_STATUS)

    @property
    def compiled(self) -> bool:
        return self.compile_info == ""

    @property
    def status(self) -> Status:
        if not self.compiled:
            return Status.COMPILE_ERROR
        if self.timed_out:
            return Status.TIMEOUT
        return Status.FINISHED if self.exit_status == 0 else Status.FAILED

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d
