from __future__ import annotations
import re
from pathlib import Path
from typing import List, Optional

from ..core.errors import SandboxEnvironmentError
from ..core.models import CompileOutcome
from .base import LanguageTask

NO_MAIN_CLASS = (
    "Error: no main class found, or multiple main classes. "
    "[Did you write a public class when asked for a non-public one?]"
)

# A public class followed (anywhere later) by public static void main(String...
# Regex only: a commented-out main class still counts.
_MAIN_CLASS_RE = re.compile(
    r"(^|\W)public\s+class\s+(\w+)\s*\{.*?public\s+static\s+void\s+main\s*\(\s*String",
    re.MULTILINE | re.DOTALL,
)


def find_main_class(prog: str) -> Optional[str]:
    """Name of the single public class with a main method, else None."""
    matches = _MAIN_CLASS_RE.findall(prog)
    if len(matches) != 1:
        return None
    return matches[0][1]


class JavaTask(LanguageTask):
    language = "java"
    version = "Java 1.6"
    default_source_name = "prog.java"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.main_class: Optional[str] = None

    def _compile(self, source: Path) -> CompileOutcome:
        try:
            prog = source.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SandboxEnvironmentError(f"Java compile: couldn't read source file: {e}") from e

        main_class = find_main_class(prog)
        if main_class is None:
            return CompileOutcome.failure(source, NO_MAIN_CLASS)

        # javac insists that the file name matches the public class
        renamed = source.with_name(f"{main_class}.java")
        try:
            source.replace(renamed)
        except OSError as e:
            raise SandboxEnvironmentError(f"Java compile: couldn't rename source file: {e}") from e
        self.main_class = main_class

        argv = [self.toolchain.javac, renamed.name]
        return self._toolchain_compile(argv, renamed, renamed.with_suffix(".class"))

    def target_command(self) -> List[str]:
        return [
            self.toolchain.java,
            "-Xrs",  # fewer JVM signal handlers: no thread dump when killed on time limit
            "-Xss8m",
            "-Xmx200m",
            self.main_class,
        ]
