from __future__ import annotations
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from ..core.errors import SandboxEnvironmentError
from ..core.models import ExecutionContext, ExecutionResult, NO_EXIT_STATUS
from ..core.utils import new_job_id
from ..executor.base import ExecSpec, Executor
from ..executor.local import LocalExecutor
from ..runner import base as runner_base
from ..runner.base import LanguageTask, ToolchainRunner
from ..runner.registry import Language, language_from_name, make_task, task_class_for
from ..settings import Settings, load_settings
from .storage import LocalFSStorage

log = structlog.get_logger()

# environment seen by the enforcer; nothing from the service leaks into user code
SAFE_ENV = {
    "PATH": "/usr/local/bin:/usr/bin:/bin",
    "LANG": "C.UTF-8",
}


class TaskRunner:
    """
    Drives one submission: workspace -> compile -> (short-circuit | enforcer run) -> ExecutionResult.
    Holds no per-run state, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        executor: Optional[Executor] = None,
        storage: Optional[LocalFSStorage] = None,
        run_toolchain: Optional[ToolchainRunner] = None,
    ):
        self.settings = settings or load_settings()
        self.toolchain = self.settings.toolchain()
        self.executor = executor or LocalExecutor()
        self.storage = storage or LocalFSStorage(self.settings.jobs_dir)
        self.run_toolchain = run_toolchain or partial(
            runner_base.run_toolchain, timeout_s=self.settings.compile_timeout_s
        )

    def deadline(self, context: ExecutionContext) -> float:
        return context.cpu_time() + self.settings.grace_seconds

    def run(
        self,
        language: str | Language,
        source: str,
        context: Optional[ExecutionContext] = None,
        stdin: str = "",
    ) -> ExecutionResult:
        lang = language_from_name(language)
        context = context or self.settings.default_context()
        job_id = new_job_id()
        blog = log.bind(job_id=job_id, language=lang.value)

        ws = self.storage.create_workspace(job_id)
        meta: Dict[str, Any] = {
            "job_id": job_id,
            "language": lang.value,
            "run_as_user": context.run_as_user,
            "limits_applied": asdict(context.limits),
        }
        kept = False
        try:
            result = self._run_in_workspace(job_id, ws, lang, source, context, stdin, meta, blog)
            if self.settings.keep_artifacts:
                meta.update(result.to_dict())
                del meta["stdout"], meta["stderr"]
                self.storage.save_artifacts(job_id, result.stdout, result.stderr, meta)
                kept = True
        except SandboxEnvironmentError as e:
            blog.error("environment_fault", error=str(e))
            raise
        finally:
            if not kept:
                self.storage.remove_workspace(job_id)
        return result

    def _run_in_workspace(self, job_id, ws: Path, lang, source, context, stdin, meta, blog) -> ExecutionResult:
        task_cls = task_class_for(lang)
        source_path = self.storage.write_source(job_id, task_cls.default_source_name, source)
        task: LanguageTask = make_task(lang, context, source_path, self.toolchain, self.run_toolchain)
        meta["version"] = task.get_version()

        outcome = task.compile()
        if not outcome.ok:
            blog.info("compile_failed")
            return ExecutionResult.not_run(outcome.compile_info)

        cmd = task.get_run_command()
        meta["planned_cmd"] = cmd
        spec = ExecSpec(cmd=cmd, workdir=ws, env=dict(SAFE_ENV),
                        timeout_s=self.deadline(context), stdin=stdin)
        res = self.executor.run(spec)

        stdout = task.filter_output(res.stdout)
        if res.timed_out:
            blog.info("run_timeout", timeout_s=spec.timeout_s)
            return ExecutionResult(compile_info="", stdout=stdout, stderr=res.stderr,
                                   exit_status=NO_EXIT_STATUS, timed_out=True,
                                   duration_s=res.duration_s)

        blog.info("run_finished", rc=res.returncode, duration_s=round(res.duration_s, 3))
        return ExecutionResult(compile_info="", stdout=stdout, stderr=res.stderr,
                               exit_status=res.returncode, timed_out=False,
                               duration_s=res.duration_s)
