# src/codesandbox/executor/local.py
from __future__ import annotations
import os, signal, subprocess, time

import structlog

from .base import ExecSpec, Executor, ProcessOutcome
from ..core.errors import SandboxEnvironmentError

log = structlog.get_logger()

# time allowed to drain pipes after the process group was killed
_DRAIN_TIMEOUT_S = 2


class LocalExecutor(Executor):
    """
    Spawns the enforcer command line on this host and waits for it with a wall-clock deadline.
    Limits are applied by the enforcer; the deadline only guards against an enforcer that hangs.
    """

    def run(self, spec: ExecSpec) -> ProcessOutcome:
        start = time.monotonic()
        try:
            p = subprocess.Popen(
                spec.cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                cwd=str(spec.workdir),
                env=spec.env or None,
                start_new_session=True,  # own process group, so the kill reaches children too
            )
        except FileNotFoundError as e:
            raise SandboxEnvironmentError(f"cannot start {spec.cmd[0]}: {e}") from e
        except PermissionError as e:
            raise SandboxEnvironmentError(f"cannot execute {spec.cmd[0]}: {e}") from e

        try:
            out, err = p.communicate(input=spec.stdin or "", timeout=spec.timeout_s)
        except subprocess.TimeoutExpired:
            self._kill_group(p)
            try:
                out, err = p.communicate(timeout=_DRAIN_TIMEOUT_S)
            except subprocess.TimeoutExpired:
                # a grandchild escaped the group and still holds the pipes.
                # Output read so far stays inside Popen and is dropped with them.
                out, err = "", ""
                self._reap(p)
            dur = time.monotonic() - start
            log.info("process_timeout", cmd=spec.cmd[0], timeout_s=spec.timeout_s, duration_s=round(dur, 3))
            return ProcessOutcome(returncode=None, stdout=out or "", stderr=err or "",
                                  timed_out=True, duration_s=dur)

        dur = time.monotonic() - start
        return ProcessOutcome(returncode=p.returncode, stdout=out or "", stderr=err or "",
                              timed_out=False, duration_s=dur)

    @staticmethod
    def _kill_group(p: subprocess.Popen) -> None:
        try:
            os.killpg(p.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass

    @staticmethod
    def _reap(p: subprocess.Popen) -> None:
        p.kill()
        p.wait()
        for f in (p.stdin, p.stdout, p.stderr):
            if f is not None:
                f.close()
