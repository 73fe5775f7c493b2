"""
LLM Client Abstraction for Commandless

Provides abstract interface for LLM completions with structured output support.
Includes OpenAI implementation with cost estimation and error handling.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Result from LLM completion.

    Attributes:
        content: The structured JSON response
        cost: Estimated cost in dollars
        tokens_used: Total tokens (input + output)
        model: Model that generated the response
    """
    content: Dict[str, Any]
    cost: float
    tokens_used: int
    model: str


class LLMClient(ABC):
    """Abstract base class for LLM clients.

    Defines interface for structured completions with cost tracking.
    Implementations must handle:
    - Async completion requests
    - JSON output enforcement
    - Cost estimation
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        response_schema: Dict[str, Any],
        max_tokens: int = 400,
        temperature: float = 0.0
    ) -> CompletionResult:
        """Get structured completion from LLM.

        Args:
            prompt: The prompt to send to the LLM
            response_schema: Field descriptions of the expected JSON object
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (0.0 = deterministic)

        Returns:
            CompletionResult with parsed JSON and metadata

        Raises:
            LLMError: If completion fails
            JSONDecodeError: If response isn't valid JSON
        """
        pass


class OpenAIClient(LLMClient):
    """OpenAI implementation of LLM client.

    Uses OpenAI's JSON mode for structured output and estimates cost
    from the token usage reported by the API.

    Example:
        client = OpenAIClient(api_key="sk-...", model="gpt-4o-mini")
        result = await client.complete(
            prompt="Which command does 'kick bob' mean?",
            response_schema={"command": {"type": "string"}},
        )
        print(result.content["command"])  # "kick"
    """

    # Model pricing (per 1000 tokens)
    PRICING = {
        "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
        "gpt-4o": {"input": 0.0025, "output": 0.01},
        "gpt-3.5-turbo": {"input": 0.0015, "output": 0.002},
    }

    SYSTEM_PROMPT = (
        "You are a Discord bot command interpreter. "
        "Always respond with valid JSON."
    )

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_retries: int = 1,
        timeout: float = 5.0
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Model name (default: gpt-4o-mini)
            max_retries: Maximum retry attempts on failure
            timeout: Request timeout in seconds
        """
        if model not in self.PRICING:
            logger.warning(
                f"Model {model} not in pricing table. Using gpt-4o-mini pricing as fallback."
            )

        self.client = AsyncOpenAI(
            api_key=api_key,
            max_retries=max_retries,
            timeout=timeout
        )
        self.model = model

    async def complete(
        self,
        prompt: str,
        response_schema: Dict[str, Any],
        max_tokens: int = 400,
        temperature: float = 0.0
    ) -> CompletionResult:
        """Get structured JSON completion from OpenAI.

        Raises:
            openai.APIError: On API failure
            JSONDecodeError: If response isn't valid JSON
        """
        schema_description = self._format_schema_description(response_schema)
        full_prompt = f"{prompt}\n\nReturn JSON with these fields:\n{schema_description}"

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": full_prompt},
            ],
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
            temperature=temperature
        )

        content_text = response.choices[0].message.content or ""
        try:
            parsed_content = json.loads(content_text)
        except json.JSONDecodeError:
            logger.error(f"LLM returned invalid JSON: {content_text}")
            raise

        input_tokens = response.usage.prompt_tokens
        output_tokens = response.usage.completion_tokens
        total_tokens = response.usage.total_tokens
        cost = self._calculate_cost(input_tokens, output_tokens)

        logger.debug(
            f"LLM completion: {total_tokens} tokens, ${cost:.6f}, "
            f"command={parsed_content.get('command', 'N/A')}"
        )

        return CompletionResult(
            content=parsed_content,
            cost=cost,
            tokens_used=total_tokens,
            model=self.model
        )

    def _calculate_cost(
        self,
        input_tokens: int,
        output_tokens: int
    ) -> float:
        pricing = self.PRICING.get(self.model, self.PRICING["gpt-4o-mini"])

        input_cost = (input_tokens / 1000) * pricing["input"]
        output_cost = (output_tokens / 1000) * pricing["output"]

        return input_cost + output_cost

    def _format_schema_description(
        self,
        schema: Dict[str, Any]
    ) -> str:
        """Format field descriptions as a human-readable list."""
        lines = []
        for field, spec in schema.items():
            field_type = spec.get("type", "any")
            description = spec.get("description", "")

            line = f"- {field} ({field_type})"
            if description:
                line += f": {description}"

            if "minimum" in spec and "maximum" in spec:
                line += f" [range: {spec['minimum']}-{spec['maximum']}]"
            elif "enum" in spec:
                line += f" [one of: {', '.join(spec['enum'])}]"

            lines.append(line)

        return "\n".join(lines)


class MockLLMClient(LLMClient):
    """Mock LLM client for testing.

    Returns a canned JSON object (or raises a canned error) without making
    API calls. Prompts are recorded in ``prompts`` for assertions.

    Example:
        client = MockLLMClient(response={"command": "ban", "confidence": 0.9})
        result = await client.complete("ban bob", {})
        assert result.content["command"] == "ban"
    """

    def __init__(
        self,
        response: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0
    ):
        """Initialize mock client.

        Args:
            response: JSON object to return (default: a conversational reply)
            error: Exception to raise instead of answering
            delay: Seconds to sleep before answering
        """
        self.response = response if response is not None else {
            "is_command": False,
            "command": None,
            "parameters": {},
            "confidence": 0.0,
            "response": "Mock LLM response",
        }
        self.error = error
        self.delay = delay
        self.prompts: List[str] = []

    async def complete(
        self,
        prompt: str,
        response_schema: Dict[str, Any],
        max_tokens: int = 400,
        temperature: float = 0.0
    ) -> CompletionResult:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        return CompletionResult(
            content=dict(self.response),
            cost=0.0,
            tokens_used=50,
            model="mock"
        )


class LLMError(Exception):
    """Base exception for LLM-related errors."""
    pass


def create_llm_client(
    api_key: Optional[str] = None,
    model: str = "gpt-4o-mini",
    use_mock: bool = False,
    timeout: float = 5.0
) -> LLMClient:
    """Create LLM client instance.

    Args:
        api_key: OpenAI API key (required unless use_mock=True)
        model: Model name
        use_mock: Force mock client (for testing only)
        timeout: Request timeout in seconds

    Returns:
        LLMClient instance (OpenAI or Mock)

    Raises:
        ValueError: If api_key is None and not using mock
    """
    if use_mock:
        logger.info("Using mock LLM client (explicit test mode)")
        return MockLLMClient()

    # Auto-detect test keys for test suite ONLY
    if api_key in ("test", "test-key", "sk-test"):
        logger.info("Detected test API key, using mock client")
        return MockLLMClient()

    if not api_key:
        raise ValueError(
            "OpenAI API key required for AI message analysis. "
            "Set OPENAI_API_KEY environment variable or disable the feature with "
            "COMMANDLESS_ENABLE_AI=false"
        )

    logger.info(f"Using OpenAI client with model: {model}")
    return OpenAIClient(api_key=api_key, model=model, timeout=timeout)
