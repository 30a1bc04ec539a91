"""
API key management for task-sh.

This module handles secure storage and retrieval of the OpenAI API key
using the system keyring, with the environment as a fallback.
"""

import logging
import os
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

SERVICE_NAME = "task-sh"
API_KEY_NAME = "openai_api_key"
ENV_VAR_NAME = "OPENAI_API_KEY"

logger = logging.getLogger(__name__)


def _keyring_unavailable(error: Exception) -> bool:
    return "NoKeyringError" in str(type(error)) or "No recommended backend" in str(
        error
    )


def get_api_key() -> Optional[str]:
    """
    Retrieve the OpenAI API key from keyring or environment variable.

    Returns:
        str or None: The API key if found, None otherwise.
    """
    api_key = None
    try:
        api_key = keyring.get_password(SERVICE_NAME, API_KEY_NAME)
    except KeyringError as e:
        if not _keyring_unavailable(e):
            raise
        logger.debug(f"Keyring backend not available: {e}")

    if not api_key:
        api_key = os.environ.get(ENV_VAR_NAME)
        if api_key:
            logger.info(f"Using API key from environment variable {ENV_VAR_NAME}")

    if api_key is not None and not api_key.strip():
        logger.warning(f"{ENV_VAR_NAME} is set but empty")
        return None

    return api_key


def save_api_key(api_key: str) -> bool:
    """
    Save the OpenAI API key to the system keyring.

    Args:
        api_key (str): The API key to save.

    Returns:
        bool: True if successful, False otherwise.
    """
    if not api_key or not api_key.strip():
        logger.error("Cannot save empty API key")
        return False

    try:
        keyring.set_password(SERVICE_NAME, API_KEY_NAME, api_key)
    except KeyringError as e:
        logger.error(f"Failed to save API key: {e}")
        return False

    logger.info("API key saved successfully")
    return True


def delete_api_key() -> bool:
    """
    Delete the stored API key from the system keyring.

    Returns:
        bool: True if successful, False otherwise.
    """
    try:
        keyring.delete_password(SERVICE_NAME, API_KEY_NAME)
    except PasswordDeleteError:
        logger.info("No API key found to delete")
        return True
    except KeyringError as e:
        if _keyring_unavailable(e):
            return True
        logger.error(f"Failed to delete API key: {e}")
        return False

    logger.info("API key deleted successfully")
    return True


def is_api_key_valid(api_key: str) -> bool:
    """
    Validate the format of an OpenAI API key.

    Args:
        api_key (str): The API key to validate.

    Returns:
        bool: True if the key format is valid, False otherwise.
    """
    if not api_key or not isinstance(api_key, str):
        return False

    if api_key != api_key.strip():
        return False

    # OpenAI keys start with "sk-" and are at least 43 characters long
    return api_key.startswith("sk-") and len(api_key) >= 43
