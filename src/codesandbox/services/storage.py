from __future__ import annotations
from pathlib import Path
from typing import Tuple
import json
import shutil

from ..core.errors import SandboxEnvironmentError


class LocalFSStorage:
    """
    One private working directory per invocation:
      jobs/<job_id>/
        ├─ <source>        (submitted code, maybe renamed by compile)
        ├─ <build output>  (.exe / .class / .m)
        ├─ stdout.txt      (only when artifacts are kept)
        ├─ stderr.txt
        └─ meta.json       (language, limits, command, exit status...)
    """

    def __init__(self, jobs_dir: Path):
        self.jobs_dir = jobs_dir if jobs_dir.is_absolute() else jobs_dir.resolve()

    def workspace(self, job_id: str) -> Path:
        return self.jobs_dir / job_id

    def create_workspace(self, job_id: str) -> Path:
        p = self.workspace(job_id)
        try:
            self.jobs_dir.mkdir(parents=True, exist_ok=True)
            p.mkdir()  # never share a directory between two invocations
        except OSError as e:
            raise SandboxEnvironmentError(f"cannot create workspace {p}: {e}") from e
        return p

    def write_source(self, job_id: str, name: str, code: str) -> Path:
        path = self.workspace(job_id) / name
        try:
            # lone surrogates from JSON input cannot be encoded; they become "?"
            path.write_text(code, encoding="utf-8", errors="replace")
        except OSError as e:
            raise SandboxEnvironmentError(f"cannot write source {path}: {e}") from e
        return path

    def save_artifacts(self, job_id: str, stdout: str, stderr: str, meta: dict) -> None:
        p = self.workspace(job_id)
        (p / "stdout.txt").write_text(stdout or "", encoding="utf-8", errors="replace")
        (p / "stderr.txt").write_text(stderr or "", encoding="utf-8", errors="replace")
        (p / "meta.json").write_text(
            json.dumps(meta, ensure_ascii=False, indent=2), encoding="utf-8", errors="replace"
        )

    def read_logs(self, job_id: str) -> Tuple[str, str]:
        p = self.workspace(job_id)
        out = (p / "stdout.txt").read_text(encoding="utf-8") if (p / "stdout.txt").exists() else ""
        err = (p / "stderr.txt").read_text(encoding="utf-8") if (p / "stderr.txt").exists() else ""
        return out, err

    def remove_workspace(self, job_id: str) -> None:
        shutil.rmtree(self.workspace(job_id), ignore_errors=True)
