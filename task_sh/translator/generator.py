"""
Command generation pipeline for task-sh.

Runs prompt building, the backend call, reply parsing and safety
classification strictly in order and assembles the ``Outcome``.
"""

import logging
from typing import List, Optional, Union

from task_sh.config.environment import RuntimeConfig
from task_sh.models.command_models import (
    AlternativeCommand,
    GenerationRequest,
    Outcome,
    ParsedCommand,
    SafetyVerdict,
    Shell,
)
from task_sh.translator import response_parser
from task_sh.translator.openai_client import OpenAIClient
from task_sh.translator.prompt_builder import PromptBuilder
from task_sh.validator.safety_filter import SafetyFilter, safety_filter

logger = logging.getLogger(__name__)


class CommandGenerator:
    """Turns a description into a vetted ``Outcome``."""

    def __init__(
        self,
        config: RuntimeConfig,
        client: Optional[OpenAIClient] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        safety: Optional[SafetyFilter] = None,
    ):
        self.config = config
        self.client = client or OpenAIClient(config)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.safety = safety or safety_filter

    async def generate(
        self,
        description: str,
        shell: Union[Shell, str],
        verbose: bool = False,
    ) -> Outcome:
        """
        Generate and vet a command.

        Args:
            description (str): Natural-language task description.
            shell (Union[Shell, str]): Target shell.
            verbose (bool): Keep the raw reply on the outcome.

        Returns:
            Outcome: The vetted result. A blocked verdict is returned, not
            raised.

        Raises:
            InvalidInputError: If the description is empty.
            BackendError: If the backend call fails.
            ParseError: If the reply has no command line.
        """
        return await self.run(self.build_request(description, shell), verbose=verbose)

    def build_request(
        self, description: str, shell: Union[Shell, str]
    ) -> GenerationRequest:
        """Validate the input and build the prompt without touching the backend."""
        return self.prompt_builder.build(
            description,
            shell,
            system_prompt=self.config.system_prompt,
            include_machine_context=not self.config.disable_machine_context,
        )

    async def run(self, request: GenerationRequest, verbose: bool = False) -> Outcome:
        """Send a prepared request and vet the reply."""
        raw_reply = await self.client.invoke(request)

        parsed = response_parser.parse(raw_reply)

        verdict = self.safety.classify(parsed.command)
        return self._build_outcome(
            parsed, verdict, request.shell, raw_reply if verbose else None
        )

    def _vet_alternatives(self, parsed: ParsedCommand) -> List[AlternativeCommand]:
        vetted = []
        for alternative in parsed.alternatives:
            verdict = self.safety.classify(alternative)
            if verdict.is_blocked:
                logger.info(f"Dropped blocked alternative (rule {verdict.matched_rule})")
                continue
            vetted.append(AlternativeCommand(command=alternative, verdict=verdict))
        return vetted

    def _build_outcome(
        self,
        parsed: ParsedCommand,
        verdict: SafetyVerdict,
        shell: Shell,
        raw_reply: Optional[str],
    ) -> Outcome:
        if verdict.is_blocked:
            return Outcome(
                verdict=verdict,
                shell=shell,
                command=None,
                explanation=None,
                # The raw reply contains the refused command
                raw_reply=None,
            )

        logger.debug(f"Generated command: {parsed.command!r}")
        return Outcome(
            verdict=verdict,
            shell=shell,
            command=parsed.command,
            explanation=parsed.explanation,
            alternatives=self._vet_alternatives(parsed),
            raw_reply=raw_reply,
            guidance_only=parsed.is_guidance_only,
        )


async def generate_command(
    description: str,
    shell: Union[Shell, str],
    config: RuntimeConfig,
    verbose: bool = False,
) -> Outcome:
    """Run the pipeline once with default collaborators."""
    return await CommandGenerator(config).generate(description, shell, verbose=verbose)
