from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

@dataclass
class ExecSpec:
    cmd: List[str]
    workdir: Path
    env: Dict[str,str] = field(default_factory=dict)
    timeout_s: float = 10
    stdin: Optional[str] = None

@dataclass
class ProcessOutcome:
    returncode: Optional[int]
    stdout: str
    stderr: str
    timed_out: bool
    duration_s: float

class Executor:
    def run(self, spec: ExecSpec) -> ProcessOutcome: ...
