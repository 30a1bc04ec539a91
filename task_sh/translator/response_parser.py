"""
Response parser for task-sh.

Extracts the command, explanation and optional alternatives from the
backend's free-text reply. The reply contract is line oriented:

    Command: <command>
    Explanation: <text>
    Alternatives:
    - <command>

Lines may come in any order, surrounded by blank lines, fences or chatter.
The first ``Command:`` line wins. The extracted text is opaque data and is
never interpreted by a shell here.
"""

import logging
import re
from typing import List, Optional

from task_sh.models.command_models import NoCommand, ParsedCommand, ParseResult
from task_sh.models.errors import ParseError

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "command:"
EXPLANATION_PREFIX = "explanation:"
LIST_HEADERS = ("alternatives:", "commands:")

_LIST_ITEM = re.compile(r"^(?:[-*]|\d+[.)])\s+(?P<item>.+)$")

# Leading words that mark a list item as prose rather than a command
_PROSE_HEADS = frozenset({"the", "this", "that", "those", "uses", "use", "command"})


def _value_after_prefix(line: str, prefix: str) -> Optional[str]:
    """Return the stripped text after ``prefix`` (case-insensitive), if any."""
    if not line.lower().startswith(prefix):
        return None
    value = line[len(prefix) :].strip()
    return value or None


def _looks_like_command(value: str) -> bool:
    """False for comments and for items that open with a prose word."""
    words = value.split()
    if not words or words[0].startswith("#"):
        return False
    return words[0].lower() not in _PROSE_HEADS


def _dedupe_alternatives(command: str, alternatives: List[str]) -> List[str]:
    seen = {command.lower()}
    unique: List[str] = []
    for alt in alternatives:
        key = alt.lower()
        if key in seen or not _looks_like_command(alt):
            continue
        seen.add(key)
        unique.append(alt)
    return unique


def parse_reply(raw: str) -> ParseResult:
    """
    Parse a raw backend reply.

    Args:
        raw (str): The reply text.

    Returns:
        ParseResult: ``ParsedCommand`` on success, ``NoCommand`` when no
        command line could be found.
    """
    command: Optional[str] = None
    explanation: Optional[str] = None
    alternatives: List[str] = []
    collecting_list = False

    for raw_line in (raw or "").splitlines():
        line = raw_line.strip()

        if not line:
            collecting_list = False
            continue

        if line.startswith("```"):
            continue

        lowered = line.lower()

        if lowered.startswith(COMMAND_PREFIX):
            collecting_list = False
            value = _value_after_prefix(line, COMMAND_PREFIX)
            if value is not None and command is None:
                command = value
            continue

        if lowered.startswith(EXPLANATION_PREFIX):
            collecting_list = False
            value = _value_after_prefix(line, EXPLANATION_PREFIX)
            if value is not None and explanation is None:
                explanation = value
            continue

        if lowered in LIST_HEADERS:
            collecting_list = True
            continue

        if collecting_list:
            match = _LIST_ITEM.match(line)
            if match:
                alternatives.append(match.group("item").strip())
                continue
            collecting_list = False

    if command is None:
        logger.warning("Backend reply did not contain a 'Command:' line")
        return NoCommand(raw_reply=raw or "")

    return ParsedCommand(
        command=command,
        explanation=explanation,
        alternatives=_dedupe_alternatives(command, alternatives),
    )


def parse(raw: str) -> ParsedCommand:
    """
    Parse a raw backend reply, raising on failure.

    Args:
        raw (str): The reply text.

    Returns:
        ParsedCommand: The extracted command.

    Raises:
        ParseError: If no command line was found.
    """
    result = parse_reply(raw)
    if isinstance(result, NoCommand):
        raise ParseError(
            "The backend reply did not contain a 'Command:' line.",
            raw_reply=result.raw_reply,
            reason=result.reason,
        )
    return result
