from __future__ import annotations
from typing import List

from ..core.models import ExecutionContext
from ..core.utils import as_flag_value

KB_PER_MB = 1000
BYTES_PER_MB = 1_000_000


def memsize_kb(context: ExecutionContext) -> int:
    return KB_PER_MB * context.memory_limit()


def filesize_bytes(context: ExecutionContext) -> int:
    return BYTES_PER_MB * context.disk_limit()


def enforcer_flags(context: ExecutionContext, *, memsize: int, nproc: int) -> List[str]:
    """
    Flag block handed to the enforcer before the target program.
    filesize doubles as the stdout/stderr stream cap.
    """
    filesize = as_flag_value(filesize_bytes(context))
    return [
        f"--user={context.run_as_user}",
        f"--time={as_flag_value(context.cpu_time())}",
        f"--memsize={as_flag_value(memsize)}",
        f"--filesize={filesize}",
        f"--nproc={as_flag_value(nproc)}",
        "--no-core",
        f"--streamsize={filesize}",
    ]
