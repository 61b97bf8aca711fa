"""
Integration tests for the HTTP surface (api.py) using FastAPI's TestClient.
The module-level runner is swapped for one with a stub compiler and executor.
"""

import pytest
from fastapi.testclient import TestClient

import codesandbox.api as api_module
from codesandbox.core.errors import SandboxEnvironmentError
from codesandbox.executor.base import ProcessOutcome
from codesandbox.services.task_runner import TaskRunner
from conftest import RecordingExecutor, ToolchainStub


@pytest.fixture
def executor():
    return RecordingExecutor(ProcessOutcome(returncode=0, stdout="4\n", stderr="", timed_out=False, duration_s=0.1))


@pytest.fixture
def toolchain_stub():
    return ToolchainStub()


@pytest.fixture
def client(settings, executor, toolchain_stub, monkeypatch):
    runner = TaskRunner(settings, executor=executor, run_toolchain=toolchain_stub)
    monkeypatch.setattr(api_module, "runner", runner)
    with TestClient(api_module.app) as c:
        yield c


class TestMeta:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"ok": True}

    def test_languages(self, client):
        r = client.get("/languages")
        assert r.status_code == 200
        assert r.json() == {
            "matlab": "Matlab R2012",
            "python2": "Python 2.7",
            "python3": "Python 3.2",
            "java": "Java 1.6",
            "c": "gcc-4.6.3",
        }


class TestRun:
    def test_success(self, client, executor):
        r = client.post("/run", json={"language": "python3", "code": "print(2+2)"})
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "FINISHED"
        assert body["stdout"] == "4\n"
        assert body["compile_info"] == ""
        assert body["exit_status"] == 0
        assert body["timed_out"] is False
        assert len(executor.specs) == 1

    def test_limits_in_request(self, client, executor):
        payload = {
            "language": "python3",
            "code": "print(1)",
            "limits": {"cpu_seconds": 1, "memory_mb": 50, "disk_mb": 2, "num_procs": 4},
        }
        assert client.post("/run", json=payload).status_code == 200
        cmd = executor.specs[0].cmd
        assert "--time=1" in cmd
        assert "--memsize=50000" in cmd
        assert "--filesize=2000000" in cmd
        assert "--nproc=4" in cmd

    def test_compile_error_is_a_normal_response(self, client, toolchain_stub, executor):
        toolchain_stub.rc = 1
        toolchain_stub.diagnostics = "SyntaxError: invalid syntax\n"
        r = client.post("/run", json={"language": "python3", "code": "def f(:"})
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "COMPILE_ERROR"
        assert body["compile_info"] == "SyntaxError: invalid syntax\n"
        assert body["exit_status"] == -1
        assert executor.specs == []

    def test_unknown_language(self, client):
        r = client.post("/run", json={"language": "brainfuck", "code": "+"})
        assert r.status_code == 400
        assert "brainfuck" in r.json()["detail"]

    def test_language_inferred_from_filename(self, client, executor):
        r = client.post("/run", json={"filename": "prog.py", "code": "print(2+2)"})
        assert r.status_code == 200
        assert executor.specs[0].cmd[-2:] == ["-BE", "prog.py"]

    def test_language_wins_over_filename(self, client, executor):
        r = client.post("/run", json={"language": "python2", "filename": "prog.py", "code": "print 1"})
        assert r.status_code == 200
        assert executor.specs[0].cmd[-2:] == ["-BESs", "prog.py"]

    @pytest.mark.parametrize("payload", [
        {"filename": "prog.rb", "code": "puts 1"},
        {"code": "print(1)"},
    ])
    def test_no_usable_language(self, client, executor, payload):
        r = client.post("/run", json=payload)
        assert r.status_code == 400
        assert executor.specs == []

    @pytest.mark.parametrize("limits", [
        {"cpu_seconds": 0, "memory_mb": 1, "disk_mb": 1, "num_procs": 1},
        {"cpu_seconds": 1, "memory_mb": -5, "disk_mb": 1, "num_procs": 1},
        {"cpu_seconds": 1, "memory_mb": 1, "disk_mb": 1},
    ])
    def test_invalid_limits(self, client, limits):
        r = client.post("/run", json={"language": "python3", "code": "x", "limits": limits})
        assert r.status_code == 422

    def test_environment_fault_is_500(self, client, executor):
        executor.error = SandboxEnvironmentError("cannot start /opt/runguard/runguard")
        r = client.post("/run", json={"language": "python3", "code": "print(1)"})
        assert r.status_code == 500
        assert r.json()["detail"].startswith("sandbox_error:")
