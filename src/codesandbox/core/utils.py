from __future__ import annotations
import random, string, time


def new_job_id() -> str:
    suf = "".join(random.choice(string.hexdigits.lower()) for _ in range(12))
    return f"{int(time.time())}-{suf}"


def as_flag_value(n: int) -> str:
    """Enforcer values are plain decimal integers: no separators, no sign."""
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"enforcer values must be non-negative integers, got {n!r}")
    return str(n)
