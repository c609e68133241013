# tools.py
from __future__ import annotations

import shutil
from typing import Callable, Dict, Iterable, Optional

from .errors import ToolNotFoundError
from .ui.console import Console, get_console

REQUIRED_TOOLS = ("ninja", "cmake", "make", "nasm")

TOOL_HINTS = {
    "ninja": "Install ninja (e.g., apt install ninja-build) or fix PATH.",
    "cmake": "Install CMake 3.16+ or fix PATH.",
    "make": "Install make (e.g., apt install build-essential) or fix PATH.",
    "nasm": "Install nasm (e.g., apt install nasm) or fix PATH.",
}


def check_tool(
    name: str,
    *,
    console: Optional[Console] = None,
    which: Optional[Callable[[str], Optional[str]]] = None,
) -> str:
    """Return the resolved path of `name`, or raise ToolNotFoundError."""
    console = console or get_console()
    path = (which or shutil.which)(name)
    console.print_tool_check(name, path)
    if not path:
        raise ToolNotFoundError(name, hint=TOOL_HINTS.get(name, f"Install {name} or fix PATH."))
    return path


def check_tools(
    names: Iterable[str] = REQUIRED_TOOLS,
    *,
    console: Optional[Console] = None,
    which: Optional[Callable[[str], Optional[str]]] = None,
) -> Dict[str, str]:
    """Check tools in order; the first missing one aborts."""
    return {name: check_tool(name, console=console, which=which) for name in names}
