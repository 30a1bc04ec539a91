"""
Shared test fixtures for task-sh tests.

This module contains pytest fixtures that are shared across all test modules,
including mocks for the keyring and the OpenAI SDK, runtime configurations
and a clean process environment.
"""

import logging
from typing import List
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from faker import Faker

from task_sh.config.environment import (
    DISABLE_MACHINE_CONTEXT_ENV,
    FAKE_RESPONSE_ENV,
    RuntimeConfig,
)
from task_sh.models.command_models import GenerationRequest, Shell
from task_sh.utils.logging import ROOT_LOGGER_NAME

fake = Faker()


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the caller's keys, overrides and config dir."""
    for name in (
        "OPENAI_API_KEY",
        FAKE_RESPONSE_ENV,
        DISABLE_MACHINE_CONTEXT_ENV,
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)
    yield

    # Drop handlers bound to streams captured during the test
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)


# ============================================================================
# API Key Fixtures
# ============================================================================


@pytest.fixture
def valid_api_key() -> str:
    """Return a valid OpenAI API key format for testing."""
    return "sk-" + "a" * 48  # 51 characters total


@pytest.fixture
def invalid_api_key() -> str:
    """Return an invalid API key format for testing."""
    return "invalid-key-format"


@pytest.fixture
def mock_keyring():
    """Mock the keyring module for testing."""
    with (
        patch("keyring.get_password") as mock_get,
        patch("keyring.set_password") as mock_set,
        patch("keyring.delete_password") as mock_delete,
    ):
        # Default behavior: no key stored
        mock_get.return_value = None
        mock_set.return_value = None
        mock_delete.return_value = None

        yield {"get": mock_get, "set": mock_set, "delete": mock_delete}


# ============================================================================
# Runtime Configuration Fixtures
# ============================================================================


@pytest.fixture
def live_config(valid_api_key) -> RuntimeConfig:
    """Configuration for a live backend call."""
    return RuntimeConfig(api_key=valid_api_key, timeout=5.0)


@pytest.fixture
def fake_config():
    """Factory for test-mode configurations with a fixed reply."""

    def _make(reply: str, **overrides) -> RuntimeConfig:
        return RuntimeConfig(fake_response=reply, **overrides)

    return _make


@pytest.fixture
def sample_request() -> GenerationRequest:
    """A minimal generation request."""
    return GenerationRequest(
        description="list files",
        shell=Shell.BASH,
        system_prompt="You translate tasks into bash commands.",
        user_prompt="Description: list files",
    )


# ============================================================================
# OpenAI SDK Fixtures
# ============================================================================


def make_completion(content, tool_arguments: List[str] = None):
    """Build an object shaped like a chat completion response."""
    message = Mock()
    message.content = content
    if tool_arguments:
        calls = []
        for arguments in tool_arguments:
            call = Mock()
            call.function.arguments = arguments
            calls.append(call)
        message.tool_calls = calls
    else:
        message.tool_calls = None

    choice = Mock()
    choice.message = message

    response = Mock()
    response.choices = [choice]
    return response


@pytest.fixture
def mock_async_openai():
    """Patch ``AsyncOpenAI`` in the client module and expose the create mock."""
    with patch("task_sh.translator.openai_client.AsyncOpenAI") as mock_cls:
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        client.chat.completions.create = AsyncMock()
        mock_cls.return_value = client
        yield {"cls": mock_cls, "client": client, "create": client.chat.completions.create}


# ============================================================================
# Test Data Fixtures
# ============================================================================


@pytest.fixture
def fake_description() -> str:
    """A random non-empty task description."""
    return fake.sentence(nb_words=6)


@pytest.fixture
def safe_commands() -> List[str]:
    return [
        "ls -laS",
        "du -sh * | sort -h",
        "find . -name '*.py' -type f",
        "grep -rn TODO src/",
        "ps aux | grep python",
        "tar -czf backup.tar.gz docs/",
        "git log --oneline -n 10",
    ]


@pytest.fixture
def completion_factory():
    """Expose ``make_completion`` to test modules."""
    return make_completion
