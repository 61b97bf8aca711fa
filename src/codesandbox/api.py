from __future__ import annotations
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Dict, Optional

from .core.errors import SandboxEnvironmentError, UnknownLanguageError
from .core.models import ExecutionContext, Limits
from .logging import setup_logging
from .runner.registry import language_from_entry, supported_languages
from .services.task_runner import TaskRunner
from .settings import load_settings

settings = load_settings()
log = setup_logging(settings.log_level)

app = FastAPI(title="Code Sandbox API")

runner = TaskRunner(settings)

# --------- Schemas ---------
class LimitsReq(BaseModel):
    cpu_seconds: int = Field(gt=0)
    memory_mb: int = Field(ge=0)
    disk_mb: int = Field(ge=0)
    num_procs: int = Field(gt=0)

class RunReq(BaseModel):
    language: Optional[str] = None
    filename: Optional[str] = None  # e.g. "Main.java"; used when language is omitted
    code: str
    stdin: str = ""
    limits: Optional[LimitsReq] = None  # None -> conf/limits.yaml defaults

class RunRes(BaseModel):
    status: str
    compile_info: str
    stdout: str
    stderr: str
    exit_status: int
    timed_out: bool
    duration_s: float

# --------- Endpoints ---------

@app.get("/health")
def health():
    return {"ok": True}

@app.get("/languages")
def languages() -> Dict[str, str]:
    return supported_languages()

@app.post("/run", response_model=RunRes)
def run(req: RunReq):
    context = None
    if req.limits is not None:
        context = ExecutionContext(
            run_as_user=runner.settings.run_as_user,
            limits=Limits(**req.limits.model_dump()),
        )
    try:
        language = req.language or language_from_entry(req.filename or "")
        result = runner.run(language, req.code, context=context, stdin=req.stdin)
    except UnknownLanguageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SandboxEnvironmentError as e:
        # sandbox is broken; not the submitter's fault
        log.error("run_environment_fault", error=str(e))
        raise HTTPException(status_code=500, detail=f"sandbox_error: {e}")
    return RunRes(**result.to_dict())
