"""
Commandless Configuration Module

Centralized configuration for the matching engine.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class CommandlessConfig:
    """Configuration for the matching engine and its optional AI collaborator.

    This class consolidates:
    - Match Selector thresholds
    - Similarity Scorer tuning
    - Conversation state lifetime and capacity
    - Generative-AI analysis (opt-in, default OFF)
    """

    # ====================
    # Match Selector
    # ====================

    natural_language_threshold: float = 0.15
    """Acceptance threshold when the input reads like natural language.

    Applied when the text contains an indicator phrase such as "please",
    "can you" or "they are". Conversational phrasing scores lower on the
    direct-name signal, so it gets a lower bar.
    """

    default_threshold: float = 0.25
    """Acceptance threshold for terse, command-like input."""

    # ====================
    # Similarity Scorer
    # ====================

    fuzzy_word_threshold: float = 0.8
    """Minimum normalized Levenshtein similarity for two words to match."""

    # ====================
    # Conversation State
    # ====================

    conversation_ttl_seconds: int = 7200
    """Time to live for per (user, channel) conversation state (2 hours)."""

    conversation_max_entries: int = 10000
    """LRU capacity of the conversation store (0 disables the cap)."""

    context_buffer_size: int = 10
    """Recent messages kept per conversation for reply context."""

    # ====================
    # Generative-AI Analysis
    # ====================

    enable_ai_analysis: bool = False
    """Ask the generative-AI collaborator before the heuristic pipeline.

    Default: False. The heuristic pipeline is always available and is used
    whenever the collaborator is disabled, unconfigured, slow or failing.
    """

    openai_api_key: Optional[str] = None
    """OpenAI API key for the AI collaborator"""

    openai_llm_model: str = "gpt-4o-mini"
    """OpenAI model used for message analysis"""

    llm_max_tokens: int = 400
    """Maximum tokens for analysis completions."""

    llm_temperature: float = 0.0
    """LLM temperature (0.0 = deterministic)."""

    ai_timeout_seconds: float = 5.0
    """Hard timeout for one analysis call; exceeding it counts as unavailable."""

    ai_min_confidence: float = 0.6
    """AI matches below this confidence are turned into clarifications."""

    @classmethod
    def from_env(cls) -> "CommandlessConfig":
        """Load configuration from environment variables.

        Environment variables:
          COMMANDLESS_NL_THRESHOLD - Natural-language threshold (0.0-1.0)
          COMMANDLESS_DEFAULT_THRESHOLD - Default threshold (0.0-1.0)
          COMMANDLESS_FUZZY_WORD_THRESHOLD - Word similarity threshold (0.0-1.0)
          COMMANDLESS_CONVERSATION_TTL - Conversation TTL in seconds
          COMMANDLESS_CONVERSATION_MAX_ENTRIES - Conversation store capacity
          COMMANDLESS_CONTEXT_BUFFER_SIZE - Reply-context ring buffer size

          COMMANDLESS_ENABLE_AI - Enable AI analysis (true/false)
          OPENAI_API_KEY - OpenAI API key
          OPENAI_LLM_MODEL - LLM model name
          COMMANDLESS_LLM_MAX_TOKENS - Max completion tokens
          COMMANDLESS_LLM_TEMPERATURE - Sampling temperature
          COMMANDLESS_AI_TIMEOUT - Analysis timeout in seconds
          COMMANDLESS_AI_MIN_CONFIDENCE - Minimum AI confidence to execute

        Returns:
            CommandlessConfig instance with values from environment
        """
        return cls(
            natural_language_threshold=float(
                os.getenv("COMMANDLESS_NL_THRESHOLD", "0.15")
            ),
            default_threshold=float(
                os.getenv("COMMANDLESS_DEFAULT_THRESHOLD", "0.25")
            ),
            fuzzy_word_threshold=float(
                os.getenv("COMMANDLESS_FUZZY_WORD_THRESHOLD", "0.8")
            ),
            conversation_ttl_seconds=int(
                os.getenv("COMMANDLESS_CONVERSATION_TTL", "7200")
            ),
            conversation_max_entries=int(
                os.getenv("COMMANDLESS_CONVERSATION_MAX_ENTRIES", "10000")
            ),
            context_buffer_size=int(
                os.getenv("COMMANDLESS_CONTEXT_BUFFER_SIZE", "10")
            ),

            enable_ai_analysis=os.getenv(
                "COMMANDLESS_ENABLE_AI", "false"
            ).lower() == "true",
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_llm_model=os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini"),
            llm_max_tokens=int(os.getenv("COMMANDLESS_LLM_MAX_TOKENS", "400")),
            llm_temperature=float(os.getenv("COMMANDLESS_LLM_TEMPERATURE", "0.0")),
            ai_timeout_seconds=float(os.getenv("COMMANDLESS_AI_TIMEOUT", "5.0")),
            ai_min_confidence=float(os.getenv("COMMANDLESS_AI_MIN_CONFIDENCE", "0.6")),
        )

    def validate(self) -> None:
        """Validate configuration settings.

        Raises:
            ValueError: If configuration is invalid
        """
        for field_name in (
            "natural_language_threshold",
            "default_threshold",
            "fuzzy_word_threshold",
            "ai_min_confidence",
        ):
            value = getattr(self, field_name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{field_name} must be 0.0-1.0, got {value}")

        if self.conversation_ttl_seconds <= 0:
            raise ValueError(
                f"conversation_ttl_seconds must be positive, got {self.conversation_ttl_seconds}"
            )

        if self.conversation_max_entries < 0:
            raise ValueError(
                f"conversation_max_entries must be >= 0, got {self.conversation_max_entries}"
            )

        if self.context_buffer_size < 1:
            raise ValueError(
                f"context_buffer_size must be >= 1, got {self.context_buffer_size}"
            )

        if not (0.0 <= self.llm_temperature <= 2.0):
            raise ValueError(
                f"llm_temperature must be 0.0-2.0, got {self.llm_temperature}"
            )

        if self.ai_timeout_seconds <= 0:
            raise ValueError(
                f"ai_timeout_seconds must be positive, got {self.ai_timeout_seconds}"
            )

        if self.enable_ai_analysis and not self.openai_api_key:
            raise ValueError(
                "enable_ai_analysis=True requires OPENAI_API_KEY"
            )

    def get_summary(self) -> str:
        """Get human-readable configuration summary.

        Returns:
            Formatted string describing current configuration
        """
        lines = [
            "Commandless Configuration Summary",
            "=" * 50,
            "",
            "Match Selector:",
            f"  Natural-language threshold: {self.natural_language_threshold}",
            f"  Default threshold: {self.default_threshold}",
            f"  Fuzzy word threshold: {self.fuzzy_word_threshold}",
            "",
            "Conversation State:",
            f"  TTL: {self.conversation_ttl_seconds}s",
            f"  Capacity: {self.conversation_max_entries or 'unbounded'}",
            f"  Context buffer: {self.context_buffer_size} messages",
            "",
            "AI Analysis:",
            f"  Enabled: {self.enable_ai_analysis}",
        ]

        if self.enable_ai_analysis:
            lines.extend([
                f"  Model: {self.openai_llm_model}",
                f"  API Key: {'Set' if self.openai_api_key else 'Not set'}",
                f"  Timeout: {self.ai_timeout_seconds}s",
                f"  Min confidence: {self.ai_min_confidence}",
            ])

        return "\n".join(lines)


# Default configuration instance (lazy-loaded from environment)
_default_config: Optional[CommandlessConfig] = None


def get_default_config() -> CommandlessConfig:
    """Get default configuration instance (singleton pattern).

    Returns:
        Default CommandlessConfig loaded from environment
    """
    global _default_config
    if _default_config is None:
        _default_config = CommandlessConfig.from_env()
        _default_config.validate()
    return _default_config
