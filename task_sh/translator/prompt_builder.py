"""
Prompt builder for task-sh.

This module turns a task description and a target shell into the chat
request sent to the generation backend. The reply contract described in the
system prompt is the one ``response_parser`` understands.
"""

import logging
from typing import Dict, Optional, Union

from task_sh.models.command_models import GenerationRequest, Shell
from task_sh.models.errors import InvalidInputError
from task_sh.utils import platform_info

logger = logging.getLogger(__name__)


class PromptBuilder:
    """
    Builder for creating prompts for command generation.

    The default system prompt steers the model towards a single command for
    the requested shell and fixes the line-oriented reply format.
    """

    SHELL_PROMPTS: Dict[Shell, str] = {
        Shell.BASH: (
            "The user is using the Bash shell. Use Bash syntax, quoting and "
            "expansions."
        ),
        Shell.ZSH: (
            "The user is using the Zsh shell. Use Zsh syntax; remember that "
            "unquoted globs with no match are an error in Zsh."
        ),
    }

    SAFETY_PROMPT = (
        "IMPORTANT SAFETY GUIDELINES:\n"
        "- Never generate commands that could harm the user's system\n"
        "- Prefer read-only or reversible commands when several approaches exist\n"
        "- Never fabricate output; avoid echo unless a literal message is wanted\n"
        "- Prefer real inspection commands (hostname, uname -a, sysctl) for "
        "questions about the environment\n"
    )

    REPLY_FORMAT = (
        "Reply using exactly this format:\n"
        "Command: <single {shell} command on one line>\n"
        "Explanation: <one short sentence>\n"
        "If several safe approaches exist, you may add:\n"
        "Alternatives:\n"
        "- <other command>\n"
        "If no command can do what was asked, reply with a Command line that "
        "starts with '#' and explains why."
    )

    def build_system_prompt(self, shell: Shell) -> str:
        """
        Build the default system prompt for a shell.

        Args:
            shell (Shell): Target shell.

        Returns:
            str: The system prompt.
        """
        return "\n\n".join(
            [
                f"You are an expert {shell.value} assistant that translates "
                "natural language into terminal commands.",
                self.SHELL_PROMPTS[shell],
                self.SAFETY_PROMPT.rstrip(),
                self.REPLY_FORMAT.format(shell=shell.value),
            ]
        )

    def build_system_context(self) -> str:
        """
        Describe the host so the model can pick available tools.

        Returns:
            str: A single host-context line.
        """
        info = platform_info.get_platform_info()
        return (
            f"Host context: os={info['os_name']}, arch={info['architecture']}, "
            f"shell={info['shell']}."
        )

    def build_user_prompt(self, description: str) -> str:
        return f"Description: {description}"

    def build(
        self,
        description: str,
        shell: Union[Shell, str],
        system_prompt: Optional[str] = None,
        include_machine_context: bool = True,
    ) -> GenerationRequest:
        """
        Build a generation request.

        Args:
            description (str): Natural-language task description.
            shell (Union[Shell, str]): Target shell.
            system_prompt (Optional[str]): Replaces the default system prompt.
            include_machine_context (bool): Append the host-context line.

        Returns:
            GenerationRequest: The immutable request.

        Raises:
            InvalidInputError: If the description is empty after trimming.
        """
        trimmed = (description or "").strip()
        if not trimmed:
            logger.warning("Received empty description")
            raise InvalidInputError(
                "The task description is empty. Describe what the command should do."
            )

        try:
            shell = Shell(shell)
        except ValueError as e:
            supported = ", ".join(s.value for s in Shell)
            raise InvalidInputError(
                f"Unsupported shell '{shell}'. Choose one of: {supported}."
            ) from e

        prompt = system_prompt or self.build_system_prompt(shell)
        if include_machine_context:
            prompt = f"{prompt}\n\n{self.build_system_context()}"

        logger.debug(f"Built {shell.value} prompt for description: {trimmed}")

        return GenerationRequest(
            description=trimmed,
            shell=shell,
            system_prompt=prompt,
            user_prompt=self.build_user_prompt(trimmed),
        )


_default_builder = PromptBuilder()


def build(
    description: str,
    shell: Union[Shell, str],
    system_prompt: Optional[str] = None,
    include_machine_context: bool = True,
) -> GenerationRequest:
    """Build a request with the default ``PromptBuilder``."""
    return _default_builder.build(
        description,
        shell,
        system_prompt=system_prompt,
        include_machine_context=include_machine_context,
    )
