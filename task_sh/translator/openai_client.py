"""
OpenAI API client for task-sh.

This module sends a generation request to the OpenAI chat completions API
and returns the raw reply text. When the test-mode override is configured the
fixed reply is returned instead and no network client is ever created.
"""

import asyncio
import logging
from typing import Optional

import httpx
from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
)

from task_sh.config.environment import RuntimeConfig
from task_sh.models.command_models import GenerationRequest
from task_sh.models.errors import BackendError, BackendErrorReason

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Async client for the generation backend.

    One request per call: no retries, one timeout. Every transport failure
    surfaces as a ``BackendError`` with a reason.
    """

    def __init__(
        self,
        config: RuntimeConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            config (RuntimeConfig): Runtime configuration; carries the API
                key, model, timeout and the test-mode override.
            http_client (Optional[httpx.AsyncClient]): Transport handed to
                the SDK; the SDK builds its own when omitted.
        """
        self.config = config
        self.model = config.model
        self.timeout = config.timeout
        self.http_client = http_client

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.config.api_key,
            timeout=self.timeout,
            max_retries=0,
            http_client=self.http_client,
        )

    async def invoke(self, request: GenerationRequest) -> str:
        """
        Send the request and return the raw reply text.

        Args:
            request (GenerationRequest): The prompt to send.

        Returns:
            str: The model's reply, verbatim.

        Raises:
            BackendError: On missing credentials, timeout, network failure,
                non-2xx status or a malformed payload.
        """
        if self.config.fake_response is not None:
            logger.debug("Using fake response for testing mode")
            return self.config.fake_response

        if not self.config.api_key:
            logger.error("No API key provided or found in keyring")
            raise BackendError(
                BackendErrorReason.MISSING_CREDENTIAL,
                "OpenAI API key is required. Set OPENAI_API_KEY or store a key "
                "with 'task --reset-api-key'.",
            )

        logger.debug(f"Dispatching chat completion request to {self.model}")

        try:
            async with self._create_client() as client:
                response = await asyncio.wait_for(
                    client.chat.completions.create(
                        model=self.model,
                        messages=request.to_messages(),
                        temperature=self.config.temperature,
                    ),
                    timeout=self.timeout,
                )
        except (APITimeoutError, asyncio.TimeoutError) as e:
            logger.error(f"Request timed out after {self.timeout}s")
            raise BackendError(
                BackendErrorReason.TIMEOUT,
                f"OpenAI request timed out after {self.timeout:g} seconds",
            ) from e
        except APIStatusError as e:
            logger.error(f"OpenAI API error: {e}")
            raise BackendError(
                BackendErrorReason.BAD_STATUS,
                f"OpenAI API returned status {e.status_code}: {e.message}",
                status_code=e.status_code,
            ) from e
        except (APIConnectionError, httpx.HTTPError) as e:
            logger.error(f"Network error during API request: {e}")
            raise BackendError(
                BackendErrorReason.NETWORK,
                f"Network error during API request: {e}",
            ) from e
        except (APIResponseValidationError, ValueError) as e:
            # Covers json.JSONDecodeError on a 2xx body that is not JSON
            logger.error(f"Malformed response from OpenAI API: {e}")
            raise BackendError(
                BackendErrorReason.MALFORMED_PAYLOAD,
                "OpenAI API returned a response that could not be decoded",
            ) from e

        content = self._extract_content(response)
        logger.debug(f"Received {len(content)} characters from {self.model}")
        return content

    def _extract_content(self, response) -> str:
        """
        Pull the reply text out of a chat completion.

        Falls back to tool-call arguments when the message content is empty.

        Raises:
            BackendError: If the payload has no usable text.
        """
        choices = getattr(response, "choices", None)
        if not choices:
            raise BackendError(
                BackendErrorReason.MALFORMED_PAYLOAD,
                "OpenAI response did not contain any choices",
            )

        message = getattr(choices[0], "message", None)
        if message is None:
            raise BackendError(
                BackendErrorReason.MALFORMED_PAYLOAD,
                "OpenAI response choice did not contain a message",
            )

        content: Optional[str] = message.content or ""
        if not content.strip():
            tool_calls = getattr(message, "tool_calls", None) or []
            fallback = "\n".join(
                call.function.arguments
                for call in tool_calls
                if getattr(call, "function", None) and call.function.arguments
            )
            if fallback.strip():
                content = fallback

        if not content or not content.strip():
            raise BackendError(
                BackendErrorReason.MALFORMED_PAYLOAD,
                "OpenAI response message was empty",
            )

        return content
