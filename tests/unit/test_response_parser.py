"""
Unit tests for task_sh.translator.response_parser module.

Tests extraction of the command, explanation and alternatives from free-text
backend replies.
"""

import pytest
from faker import Faker

from task_sh.models.command_models import NoCommand, ParsedCommand
from task_sh.models.errors import ParseError
from task_sh.translator import response_parser

fake = Faker()


class TestParseReply:
    """Test cases for parse_reply."""

    def test_well_formed_reply(self):
        """Test the basic two-line contract."""
        result = response_parser.parse_reply(
            "Command: ls -laS\nExplanation: Lists files sorted by size."
        )

        assert isinstance(result, ParsedCommand)
        assert result.command == "ls -laS"
        assert result.explanation == "Lists files sorted by size."
        assert result.alternatives == []

    def test_generated_command_and_explanation(self):
        """Test that arbitrary text after the prefixes is returned trimmed."""
        command = f"echo {fake.word()} | wc -c"
        explanation = fake.sentence()

        result = response_parser.parse_reply(
            f"Command:   {command}  \nExplanation: {explanation}\n"
        )

        assert result.command == command
        assert result.explanation == explanation

    def test_reversed_order(self):
        """Test that the explanation may come first."""
        result = response_parser.parse_reply(
            "Explanation: Shows disk usage.\nCommand: df -h"
        )

        assert result.command == "df -h"
        assert result.explanation == "Shows disk usage."

    def test_prefixes_are_case_insensitive(self):
        """Test lowercase and uppercase prefixes."""
        result = response_parser.parse_reply("COMMAND: pwd\nexplanation: Prints cwd.")

        assert result.command == "pwd"
        assert result.explanation == "Prints cwd."

    def test_surrounding_chatter_and_blank_lines(self):
        """Test that unrelated lines are ignored."""
        raw = (
            "Sure! Here is what you asked for.\n"
            "\n"
            "   Command: uname -a\n"
            "\n"
            "Explanation: Prints kernel information.\n"
            "Hope this helps."
        )

        result = response_parser.parse_reply(raw)

        assert result.command == "uname -a"
        assert result.explanation == "Prints kernel information."

    def test_code_fences_are_skipped(self):
        """Test that markdown fences around the reply do not confuse parsing."""
        raw = "```\nCommand: whoami\nExplanation: Prints the user.\n```"

        result = response_parser.parse_reply(raw)

        assert result.command == "whoami"

    def test_first_command_line_wins(self):
        """Test the first-match policy for repeated Command lines."""
        raw = "Command: ls\nCommand: rm -rf /\nExplanation: Lists files."

        result = response_parser.parse_reply(raw)

        assert result.command == "ls"

    def test_empty_command_line_is_skipped(self):
        """Test that an empty Command line does not count as a match."""
        raw = "Command:\nCommand: date\nExplanation: Shows the date."

        result = response_parser.parse_reply(raw)

        assert result.command == "date"

    def test_missing_explanation(self):
        """Test that a reply without an explanation still parses."""
        result = response_parser.parse_reply("Command: hostname")

        assert result.command == "hostname"
        assert result.explanation is None

    def test_guidance_command(self):
        """Test that '#' guidance lines are returned as the command."""
        result = response_parser.parse_reply(
            "Command: # There is no shell command for that.\nExplanation: n/a"
        )

        assert result.command.startswith("#")
        assert result.is_guidance_only

    def test_windows_line_endings(self):
        """Test CRLF replies."""
        result = response_parser.parse_reply("Command: ls\r\nExplanation: Lists.\r\n")

        assert result.command == "ls"
        assert result.explanation == "Lists."

    def test_command_text_is_opaque(self):
        """Test that shell metacharacters are preserved verbatim."""
        command = "find . -name '*.log' -mtime +7 | xargs -r ls -l $HOME"

        result = response_parser.parse_reply(f"Command: {command}")

        assert result.command == command


class TestAlternatives:
    """Test cases for the optional alternatives list."""

    def test_dash_items(self):
        raw = (
            "Command: ls -laS\n"
            "Explanation: Lists files by size.\n"
            "Alternatives:\n"
            "- ls -lS\n"
            "- du -ah . | sort -h\n"
        )

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -lS", "du -ah . | sort -h"]

    @pytest.mark.parametrize("bullet", ["-", "*", "1.", "1)"])
    def test_bullet_styles(self, bullet):
        """Test every supported list marker."""
        raw = f"Command: ls\nCommands:\n{bullet} ls -a"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -a"]

    def test_duplicates_and_command_are_removed(self):
        """Test case-insensitive de-duplication against the command."""
        raw = "Command: ls -a\nAlternatives:\n- LS -A\n- ls -l\n- ls -l\n"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -l"]

    @pytest.mark.parametrize(
        "item",
        [
            "# or check the disk usage panel",
            "use the graphical file manager instead",
            "The same with human-readable sizes",
            "command depends on your distribution",
        ],
    )
    def test_non_command_items_are_dropped(self, item):
        """Test that comments and prose are not offered as alternatives."""
        raw = f"Command: du -sh *\nAlternatives:\n- {item}\n- ls -lS\n"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -lS"]

    def test_blank_line_ends_list(self):
        """Test that a blank line closes the list."""
        raw = "Command: ls\nAlternatives:\n- ls -a\n\n- not an alternative\n"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -a"]

    def test_non_item_line_ends_list(self):
        raw = "Command: ls\nAlternatives:\n- ls -a\nThat is all.\n- ls -l"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == ["ls -a"]

    def test_items_without_header_are_ignored(self):
        raw = "Command: ls\n- ls -a"

        result = response_parser.parse_reply(raw)

        assert result.alternatives == []


class TestMissingCommand:
    """Test cases for replies without a command line."""

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   \n\n",
            "I cannot help with that.",
            "Explanation: Only an explanation.",
            "Command:",
            "Command:    \nExplanation: empty",
        ],
    )
    def test_returns_no_command(self, raw):
        result = response_parser.parse_reply(raw)

        assert isinstance(result, NoCommand)
        assert result.reason == "no_command_found"
        assert result.raw_reply == raw

    def test_none_reply(self):
        """Test that None is handled as an empty reply."""
        result = response_parser.parse_reply(None)

        assert isinstance(result, NoCommand)

    def test_parse_raises_parse_error(self):
        """Test that parse converts NoCommand into ParseError."""
        raw = "Sorry, I don't know."

        with pytest.raises(ParseError) as exc_info:
            response_parser.parse(raw)

        assert exc_info.value.raw_reply == raw
        assert exc_info.value.reason == "no_command_found"

    def test_parse_returns_parsed_command(self):
        result = response_parser.parse("Command: ls")

        assert isinstance(result, ParsedCommand)
        assert result.command == "ls"
