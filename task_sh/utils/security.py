"""
Security helpers for task-sh.

Masking of sensitive values before they reach logs or the terminal.
"""


def secure_string(value: str) -> str:
    """
    Securely mask a sensitive string for display or logging.

    Args:
        value (str): The sensitive string to mask.

    Returns:
        str: Masked string.
    """
    if not value:
        return ""

    # Show only first and last character, mask the rest
    if len(value) <= 4:
        return "*" * len(value)
    return value[0] + "*" * (len(value) - 2) + value[-1]
