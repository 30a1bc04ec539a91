"""
Platform information for task-sh.

Host details used to steer the model (OS, architecture, login shell) and to
pick a default target shell.
"""

import os
import platform
from typing import Dict, Optional

SUPPORTED_SHELLS = ("bash", "zsh")


def get_platform_info() -> Dict[str, str]:
    """
    Get basic information about the current platform.

    Returns:
        Dict[str, str]: Dictionary containing platform information.
    """
    return {
        "os_name": platform.system().lower() or "unknown",
        "architecture": platform.machine() or "unknown",
        "shell": os.environ.get("SHELL") or "unknown",
    }


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def is_macos() -> bool:
    return platform.system().lower() == "darwin"


def detect_login_shell() -> Optional[str]:
    """
    Return ``bash`` or ``zsh`` when ``$SHELL`` points at one of them.

    Returns:
        Optional[str]: The supported shell name, or None.
    """
    shell_path = os.environ.get("SHELL", "")
    if not shell_path:
        return None

    name = os.path.basename(shell_path).lower()
    if name in SUPPORTED_SHELLS:
        return name
    return None
