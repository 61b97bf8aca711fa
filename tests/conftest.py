"""Shared fixtures for the codesandbox tests."""

import os
import stat
import sys
from pathlib import Path

import pytest

from codesandbox.core.models import ExecutionContext, Limits, Toolchain
from codesandbox.executor.base import ExecSpec, ProcessOutcome
from codesandbox.settings import Settings

# Stands in for runguard: drops every --flag, then execs the target program unconfined.
STUB_ENFORCER = """#!/bin/sh
while [ $# -gt 0 ]; do
  case "$1" in
    --*) shift ;;
    *) break ;;
  esac
done
exec "$@"
"""


class ToolchainStub:
    """Records compiler invocations instead of running them."""

    def __init__(self, rc=0, diagnostics=""):
        self.rc = rc
        self.diagnostics = diagnostics
        self.calls = []

    def __call__(self, argv, cwd):
        self.calls.append((list(argv), Path(cwd)))
        return self.rc, self.diagnostics


class RecordingExecutor:
    """Returns a canned ProcessOutcome and remembers the ExecSpec it was given."""

    def __init__(self, outcome=None, error=None):
        self.outcome = outcome or ProcessOutcome(
            returncode=0, stdout="", stderr="", timed_out=False, duration_s=0.01
        )
        self.error = error
        self.specs: list[ExecSpec] = []

    def run(self, spec):
        self.specs.append(spec)
        if self.error:
            raise self.error
        return self.outcome


@pytest.fixture
def limits():
    return Limits(cpu_seconds=5, memory_mb=100, disk_mb=10, num_procs=10)


@pytest.fixture
def context(limits):
    return ExecutionContext(run_as_user="coderunner", limits=limits)


@pytest.fixture
def toolchain():
    return Toolchain()


@pytest.fixture
def stub_enforcer(tmp_path):
    if not Path("/bin/sh").exists():
        pytest.skip("needs /bin/sh for the stub enforcer")
    path = tmp_path / "bin" / "runguard"
    path.parent.mkdir()
    path.write_text(STUB_ENFORCER)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a private jobs dir, without touching conf/."""
    return Settings(
        jobs_dir=tmp_path / "jobs",
        enforcer_path="/opt/runguard/runguard",
        run_as_user="coderunner",
        grace_seconds=0.5,
        limits={"cpu_seconds": 5, "memory_mb": 100, "disk_mb": 10, "num_procs": 10},
    )


@pytest.fixture
def live_settings(settings, stub_enforcer):
    """Settings for real runs: stub enforcer + this interpreter as python3."""
    return settings.model_copy(
        update={
            "enforcer_path": str(stub_enforcer),
            "runtimes": {"python3": sys.executable, "python2": sys.executable},
        }
    )


def jobs_left(settings):
    d = settings.jobs_dir
    return sorted(os.listdir(d)) if d.exists() else []
