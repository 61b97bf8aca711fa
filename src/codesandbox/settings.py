from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.models import ExecutionContext, Limits, Toolchain

log = structlog.get_logger()


class Settings(BaseSettings):
    # ---- workspace ----
    jobs_dir: Path = Path("jobs")
    keep_artifacts: bool = False

    # ---- enforcer ----
    enforcer_path: str = "/usr/local/bin/runguard"
    run_as_user: str = "coderunner"
    # wall-clock deadline = cpu time + grace
    grace_seconds: float = 2.0
    compile_timeout_s: int = 30

    # ---- tool paths, e.g. {"python3": "/usr/bin/python3", "gcc": "gcc"} ----
    runtimes: Dict[str, str] = {}

    # ---- config files ----
    limits_file: Path = Path("conf/limits.yaml")

    # ---- default limits (read from YAML) ----
    limits: Dict[str, Any] = {}

    log_level: str = "INFO"

    # env prefix SBX_*
    model_config = SettingsConfigDict(env_prefix="SBX_", extra="ignore")

    def toolchain(self) -> Toolchain:
        return Toolchain.from_mapping(self.enforcer_path, self.runtimes)

    def default_limits(self) -> Limits:
        return Limits.from_mapping(self.limits)

    def default_context(self) -> ExecutionContext:
        return ExecutionContext(run_as_user=self.run_as_user, limits=self.default_limits())


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> Settings:
    # 0) base from env SBX_*
    s = Settings()

    # 1) conf/sandbox.yaml (or SANDBOX_CONF)
    data = _read_yaml(Path(os.environ.get("SANDBOX_CONF", "conf/sandbox.yaml")))

    enforcer = data.get("enforcer") or {}
    if not isinstance(enforcer, dict):
        enforcer = {}
    runtimes = data.get("runtimes") or {}
    if not isinstance(runtimes, dict):
        runtimes = {}

    # 2) merge into Settings, keeping field types
    s = s.model_copy(
        update={
            "jobs_dir": Path(str(data.get("jobs_dir", s.jobs_dir))),
            "keep_artifacts": bool(data.get("keep_artifacts", s.keep_artifacts)),
            "enforcer_path": str(enforcer.get("path", s.enforcer_path)),
            "run_as_user": str(enforcer.get("user", s.run_as_user)),
            "grace_seconds": float(enforcer.get("grace_seconds", s.grace_seconds)),
            "compile_timeout_s": int(data.get("compile_timeout_s", s.compile_timeout_s)),
            "runtimes": {**s.runtimes, **{str(k): str(v) for k, v in runtimes.items()}},
            "log_level": str(data.get("log_level", s.log_level)),
        }
    )

    # 3) conf/limits.yaml (optional); a broken file must not take the service down
    limits: Dict[str, Any] = {}
    try:
        raw = _read_yaml(s.limits_file)
        Limits.from_mapping(raw)
        limits = raw
    except (yaml.YAMLError, ValueError) as e:
        log.warning("limits_file_ignored", path=str(s.limits_file), error=str(e))

    return s.model_copy(update={"limits": limits})
