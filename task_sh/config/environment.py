"""
Runtime configuration for task-sh.

Environment variables (credential, test-mode override) are read exactly once
per process into an immutable ``RuntimeConfig`` that is passed explicitly to
the backend client.
"""

import logging
import os
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from task_sh.config import api_manager
from task_sh.config.settings import Settings

FAKE_RESPONSE_ENV = "TASK_SH_FAKE_RESPONSE"
DISABLE_MACHINE_CONTEXT_ENV = "TASK_SH_DISABLE_MACHINE_CONTEXT"

DEFAULT_MODEL = Settings.DEFAULT_SETTINGS["generation"]["model"]

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
    """Process-local, read-only configuration for one invocation."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(default=None, repr=False)
    fake_response: Optional[str] = Field(default=None, repr=False)
    disable_machine_context: bool = False
    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    timeout: float = Field(default=30.0, gt=0)
    system_prompt: Optional[str] = None

    @property
    def test_mode(self) -> bool:
        return self.fake_response is not None


def load_env_file() -> bool:
    """Load a ``.env`` file from the working directory without overriding."""
    return load_dotenv(find_dotenv(usecwd=True), override=False)


def load_runtime_config(
    settings: Settings,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    system_prompt: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RuntimeConfig:
    """
    Build the runtime configuration from settings, flags and the environment.

    The test-mode override is looked up first; when it is present no
    credential lookup (keyring or environment) is performed.

    Args:
        settings (Settings): Loaded settings file.
        api_key (Optional[str]): Key given on the command line.
        model (Optional[str]): Model override from the command line.
        system_prompt (Optional[str]): System prompt override.
        environ (Optional[Mapping[str, str]]): Environment to read, defaults
            to ``os.environ``.

    Returns:
        RuntimeConfig: The frozen configuration.
    """
    env = os.environ if environ is None else environ

    fake_response = env.get(FAKE_RESPONSE_ENV)
    if fake_response is not None:
        logger.debug(f"{FAKE_RESPONSE_ENV} is set; backend calls are disabled")
        resolved_key = api_key
    else:
        resolved_key = api_key or api_manager.get_api_key()

    return RuntimeConfig(
        api_key=resolved_key,
        fake_response=fake_response,
        disable_machine_context=DISABLE_MACHINE_CONTEXT_ENV in env,
        model=model or settings.get("generation", "model") or DEFAULT_MODEL,
        temperature=float(settings.get("generation", "temperature", 0.2)),
        timeout=float(settings.get("generation", "timeout", 30)),
        system_prompt=system_prompt
        or settings.get("generation", "system_prompt")
        or None,
    )
