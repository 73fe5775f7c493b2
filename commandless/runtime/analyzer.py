"""
Generative-AI message analysis.

Asks the LLM collaborator whether a message is a command for one of the
bot's catalog entries and, if so, which parameters it carries. The
analyzer never raises: every failure (timeout, transport error, invalid
JSON, unknown command) becomes ``AiUnavailable`` and the caller falls
back to the heuristic pipeline.

Copyright (c) 2025 Graziano Labs Corp.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import AnalysisError
from .firewall import MENTION_RE
from .llm_client import LLMClient
from .patterns import CatalogEntry
from .slots import Slot, parse_slot

logger = logging.getLogger(__name__)

DEFAULT_PERSONALITY = (
    "You are a helpful Discord bot assistant that can handle moderation "
    "commands and casual conversation."
)

RESPONSE_SCHEMA: Dict[str, Dict[str, Any]] = {
    "is_command": {
        "type": "boolean",
        "description": "True when the user wants one of the available commands executed",
    },
    "command": {
        "type": "string",
        "description": "Name of the matched command (without '/'), or null",
    },
    "parameters": {
        "type": "object",
        "description": "Extracted values keyed by slot (user, reason, message, amount, duration, role, channel, name)",
    },
    "confidence": {
        "type": "number",
        "minimum": 0,
        "maximum": 100,
        "description": "How sure you are about the command",
    },
    "response": {
        "type": "string",
        "description": "Friendly reply when this is casual conversation",
    },
}


class AiAnalysis(BaseModel):
    """Validated reply of the AI collaborator."""
    is_command: bool = False
    command: Optional[str] = None
    parameters: Dict[str, str] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    response: Optional[str] = None
    clarification_question: Optional[str] = None
    cost_usd: float = 0.0

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> Any:
        # Models answer on a 0-100 scale as often as on 0-1
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 1.0:
            return value / 100.0
        return value

    @field_validator("parameters", mode="before")
    @classmethod
    def stringify_parameters(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                str(k): str(v).strip()
                for k, v in value.items()
                if v is not None and str(v).strip()
            }
        return value

    @field_validator("command", mode="before")
    @classmethod
    def strip_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lstrip("/") or None
        return value

    def slot_params(self) -> Dict[Slot, str]:
        """Parameters keyed by canonical slot; mention markup reduced to its id."""
        params: Dict[Slot, str] = {}
        for key, value in self.parameters.items():
            slot = parse_slot(key.lower())
            if slot is None:
                continue
            if MENTION_RE.fullmatch(value):
                value = "".join(ch for ch in value if ch.isdigit())
            params[slot] = value
        return params


@dataclass
class AiUnavailable:
    """The collaborator could not give a usable answer."""
    reason: str
    code: Optional[str] = None


AnalysisOutcome = Union[AiAnalysis, AiUnavailable]


class CommandAnalyzer:
    """Analyze messages with an LLM against a bot's catalog.

    Example:
        analyzer = CommandAnalyzer(MockLLMClient(response={...}))
        outcome = await analyzer.analyze("kick <@42> please", entries)
        if isinstance(outcome, AiAnalysis) and outcome.is_command:
            ...
    """

    def __init__(
        self,
        client: LLMClient,
        timeout: float = 5.0,
        max_tokens: int = 400,
        temperature: float = 0.0,
        personality: Optional[str] = None
    ):
        self.client = client
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.personality = personality or DEFAULT_PERSONALITY

    async def analyze(
        self,
        text: str,
        entries: Sequence[CatalogEntry],
        context: Optional[str] = None,
        mentioned_user_ids: Sequence[str] = ()
    ) -> AnalysisOutcome:
        """
        Analyze one message.

        Args:
            text: Message text (mentions stripped)
            entries: Catalog of the bot
            context: Reply context, e.g. the message being replied to
            mentioned_user_ids: Structured user mentions of the message

        Returns:
            AiAnalysis on success, AiUnavailable on any failure
        """
        try:
            analysis = await self._analyze(text, entries, context, mentioned_user_ids)
        except AnalysisError as e:
            logger.warning(f"AI analysis unavailable, using heuristics: {e}")
            return AiUnavailable(reason=e.message, code=e.code)

        logger.debug(
            f"AI analysis: command={analysis.command} is_command={analysis.is_command} "
            f"confidence={analysis.confidence:.2f}"
        )
        return analysis

    async def _analyze(
        self,
        text: str,
        entries: Sequence[CatalogEntry],
        context: Optional[str],
        mentioned_user_ids: Sequence[str]
    ) -> AiAnalysis:
        prompt = self.build_prompt(text, entries, context, mentioned_user_ids)

        try:
            result = await asyncio.wait_for(
                self.client.complete(
                    prompt=prompt,
                    response_schema=RESPONSE_SCHEMA,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise AnalysisError(
                code="E202",
                message=f"AI analysis timed out after {self.timeout}s"
            ) from e
        except json.JSONDecodeError as e:
            raise AnalysisError(code="E201", message=f"AI reply is not valid JSON: {e}") from e
        except Exception as e:
            raise AnalysisError(code="E203", message=f"AI request failed: {e}") from e

        try:
            analysis = AiAnalysis.model_validate(result.content)
        except ValidationError as e:
            raise AnalysisError(
                code="E201",
                message=f"AI reply does not match the expected shape: {e.error_count()} error(s)"
            ) from e

        if analysis.is_command:
            entry = self._find_entry(entries, analysis.command)
            if entry is None:
                raise AnalysisError(
                    code="E201",
                    message=f"AI picked unknown command '{analysis.command}'",
                    hint="The command must be one of the bot's catalog entries"
                )
            analysis.command = entry.command_name

        analysis.cost_usd = result.cost
        return analysis

    def build_prompt(
        self,
        text: str,
        entries: Sequence[CatalogEntry],
        context: Optional[str] = None,
        mentioned_user_ids: Sequence[str] = ()
    ) -> str:
        """Build the analysis prompt listing the bot's commands."""
        sections: List[str] = [self.personality]

        if context:
            sections.append("\nConversation context:")
            sections.append(context)

        sections.append("\nAvailable commands:")
        for entry in entries:
            required = ", ".join(sorted(s.value for s in entry.required_slots)) or "none"
            line = (
                f"- Name: {entry.command_name}, Pattern: {entry.primary_pattern}, "
                f"Output: {entry.output_template}, Required: {required}"
            )
            if entry.description:
                line += f", Description: {entry.description}"
            sections.append(line)

        if mentioned_user_ids:
            sections.append(f"\nMentioned users (ids): {', '.join(mentioned_user_ids)}")

        sections.append(f'\nUser message: "{text}"')

        sections.append("\nDecide whether the user wants to run one of the commands above.")
        sections.append("Greetings, questions about the bot and general chat are NOT commands.")
        sections.append("Extract parameters from the whole message; use mentioned user ids for 'user'.")
        sections.append("Reply in the user's language, keep JSON keys in English.")

        sections.append("\nConfidence scale:")
        sections.append("- 90-100: Clear command with all parameters")
        sections.append("- 70-89: Clear intent, most parameters")
        sections.append("- 60-69: Likely intent, may need clarification")
        sections.append("- Below 60: Ambiguous")

        return "\n".join(sections)

    def _find_entry(
        self,
        entries: Sequence[CatalogEntry],
        command: Optional[str]
    ) -> Optional[CatalogEntry]:
        if not command:
            return None
        wanted = command.lower()
        for entry in entries:
            if entry.command_name.lower() == wanted:
                return entry
        return None
