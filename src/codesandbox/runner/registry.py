from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Dict, Type

from ..core.errors import UnknownLanguageError
from ..core.models import ExecutionContext, Toolchain
from .base import LanguageTask, ToolchainRunner, run_toolchain
from .c_runner import CTask
from .java_runner import JavaTask
from .matlab_runner import MatlabTask
from .python_runner import Python2Task, Python3Task


class Language(str, Enum):
    MATLAB = "matlab"
    PYTHON2 = "python2"
    PYTHON3 = "python3"
    JAVA = "java"
    C = "c"


_TASKS: Dict[Language, Type[LanguageTask]] = {
    Language.MATLAB: MatlabTask,
    Language.PYTHON2: Python2Task,
    Language.PYTHON3: Python3Task,
    Language.JAVA: JavaTask,
    Language.C: CTask,
}

_ALIASES = {
    "python": Language.PYTHON3,
    "py3": Language.PYTHON3,
    "py2": Language.PYTHON2,
    "m": Language.MATLAB,
}


def language_from_name(name: str | Language) -> Language:
    if isinstance(name, Language):
        return name
    key = (name or "").strip().lower()
    try:
        return Language(key)
    except ValueError:
        pass
    if key in _ALIASES:
        return _ALIASES[key]
    raise UnknownLanguageError(name)


def language_from_entry(entry: str) -> Language:
    entry = entry.lower()
    if entry.endswith(".py"):   return Language.PYTHON3
    if entry.endswith(".java"): return Language.JAVA
    if entry.endswith(".c"):    return Language.C
    if entry.endswith(".m"):    return Language.MATLAB
    raise UnknownLanguageError(entry)


def task_class_for(language: str | Language) -> Type[LanguageTask]:
    return _TASKS[language_from_name(language)]


def make_task(
    language: str | Language,
    context: ExecutionContext,
    source_path: Path,
    toolchain: Toolchain,
    run_toolchain: ToolchainRunner = run_toolchain,
) -> LanguageTask:
    cls = task_class_for(language)
    return cls(context, source_path, toolchain, run_toolchain=run_toolchain)


def supported_languages() -> Dict[str, str]:
    return {lang.value: cls.version for lang, cls in _TASKS.items()}
