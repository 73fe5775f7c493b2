"""
Command engine: routes one incoming chat message to a bot command.

Pipeline per message:
1. Record the message in the per-conversation context buffer
2. Resolve a pending clarification, if any
3. Strip mentions and run the conversational filter
4. Ask the AI collaborator (opt-in), falling back to heuristics
5. Score the catalog, select, extract parameters, render

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..config import CommandlessConfig, get_default_config
from ..metrics import EngineMetrics, get_global_metrics
from .analyzer import AiAnalysis, AiUnavailable, CommandAnalyzer
from .catalog import CatalogStore, DefinitionLike
from .firewall import ConversationalFilter, FilterVerdict, strip_mentions
from .llm_client import create_llm_client
from .matcher import ScoringWeights, SimilarityScorer
from .patterns import CatalogEntry, PatternGenerator
from .response_parser import ReplyKind, ResponseParser
from .selector import (
    Clarify,
    Conversational,
    Execute,
    MatchDecision,
    MatchResult,
    MatchSelector,
    Rejected,
)
from .slot_extractors import MentionData, ParameterExtractor
from .slots import Slot
from .state import ConversationStore, MessageRecord
from .templates import CommandRenderer
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

GREETING_RESPONSE = (
    "Hello! How can I help you today? I can help with moderation commands or just chat!"
)
NO_COMMANDS_RESPONSE = (
    "Hi there! I don't have any commands configured yet, but I'm happy to chat!"
)
SMALL_TALK_RESPONSE = "Hey! I'm here if you need anything."
INVALID_COMPOUND_REASON = (
    "That looks like two commands glued together. Please ask for one command at a time."
)


@dataclass
class MessageIntake:
    """One chat message addressed to a bot."""
    text: str
    author_id: str
    channel_id: str
    mentioned_user_ids: List[str] = field(default_factory=list)
    mentioned_channel_ids: List[str] = field(default_factory=list)
    mentioned_role_ids: List[str] = field(default_factory=list)
    is_reply_to_bot: bool = False
    conversation_context: Optional[str] = None
    message_id: Optional[str] = None
    reference_message_id: Optional[str] = None
    bot_user_id: Optional[str] = None
    author_name: Optional[str] = None

    @property
    def mentions(self) -> MentionData:
        return MentionData(
            user_ids=list(self.mentioned_user_ids),
            channel_ids=list(self.mentioned_channel_ids),
            role_ids=list(self.mentioned_role_ids),
            bot_user_id=self.bot_user_id,
        )


class CommandEngine:
    """
    Natural-language command matching for many bots.

    Owns the catalog store and the conversation store (both injectable) and
    wires the filter, scorer, selector and optional AI analyzer together.

    Example:
        engine = CommandEngine(config=CommandlessConfig())
        engine.rebuild_catalog("bot-1", definitions)
        result = await engine.process_message("bot-1", MessageIntake(
            text="warn <@42> for spamming",
            author_id="7",
            channel_id="general",
            mentioned_user_ids=["42"],
        ))
        # Execute(rendered_command="/warn user:42 reason:spamming", ...)
    """

    def __init__(
        self,
        config: Optional[CommandlessConfig] = None,
        catalog: Optional[CatalogStore] = None,
        conversations: Optional[ConversationStore] = None,
        analyzer: Optional[CommandAnalyzer] = None,
        metrics: Optional[EngineMetrics] = None,
        vocabulary: Optional[Vocabulary] = None
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration. If None, the shared default loaded
                from the environment is used. Raises ValueError when invalid.
            catalog: Catalog store. If None, an empty store is created.
            conversations: Conversation store. If None, one is built from config.
            analyzer: AI analyzer. If None and AI analysis is enabled in config,
                one is built from config (raises ValueError without an API key).
            metrics: Metrics collector. If None, the global collector is used.
            vocabulary: Lookup tables for patterns, scoring and filtering.
        """
        self.config = config or get_default_config()
        self.config.validate()
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY

        self.catalog = catalog if catalog is not None else CatalogStore(PatternGenerator(self.vocabulary))
        self.conversations = conversations if conversations is not None else ConversationStore(
            ttl_seconds=self.config.conversation_ttl_seconds,
            max_entries=self.config.conversation_max_entries,
            buffer_size=self.config.context_buffer_size,
        )
        self.metrics = metrics or get_global_metrics()

        self.filter = ConversationalFilter(self.vocabulary)
        self.scorer = SimilarityScorer(
            vocabulary=self.vocabulary,
            weights=ScoringWeights(),
            word_threshold=self.config.fuzzy_word_threshold,
        )
        self.extractor = ParameterExtractor()
        self.renderer = CommandRenderer()
        self.selector = MatchSelector(
            extractor=self.extractor,
            renderer=self.renderer,
            vocabulary=self.vocabulary,
            natural_language_threshold=self.config.natural_language_threshold,
            default_threshold=self.config.default_threshold,
        )
        self.replies = ResponseParser()

        if analyzer is None and self.config.enable_ai_analysis:
            client = create_llm_client(
                api_key=self.config.openai_api_key,
                model=self.config.openai_llm_model,
                timeout=self.config.ai_timeout_seconds,
            )
            analyzer = CommandAnalyzer(
                client,
                timeout=self.config.ai_timeout_seconds,
                max_tokens=self.config.llm_max_tokens,
                temperature=self.config.llm_temperature,
            )
        self.analyzer = analyzer

        logger.info(
            f"Command engine ready (AI analysis: {'ENABLED' if self.analyzer else 'DISABLED'})"
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def rebuild_catalog(self, bot_id: str, definitions: Iterable[DefinitionLike]) -> List[CatalogEntry]:
        """Replace the catalog of a bot with entries built from its command definitions."""
        return self.catalog.rebuild(bot_id, definitions)

    # ------------------------------------------------------------------
    # Heuristic path
    # ------------------------------------------------------------------

    def match(self, bot_id: str, intake: MessageIntake) -> MatchDecision:
        """
        Route a message with the heuristic pipeline only.

        No conversation state is read or written.

        Args:
            bot_id: Bot whose catalog is used
            intake: Incoming message

        Returns:
            MatchDecision with the routing result
        """
        early = self._prefilter(bot_id, intake)
        if early is not None:
            return early
        return self._score_and_select(bot_id, intake)

    def _prefilter(self, bot_id: str, intake: MessageIntake) -> Optional[MatchDecision]:
        cleaned = strip_mentions(intake.text)
        if not cleaned:
            return MatchDecision(result=Conversational(response_text=GREETING_RESPONSE))

        entries = self.catalog.get(bot_id)
        if not entries:
            logger.info(f"No commands configured for bot {bot_id}")
            return MatchDecision(result=Conversational(response_text=NO_COMMANDS_RESPONSE))

        verdict = self.filter.check(cleaned, [e.command_name for e in entries])
        if verdict is FilterVerdict.INVALID_COMPOUND:
            logger.info(f"Rejected compound command: '{cleaned}'")
            return MatchDecision(result=Rejected(reason=INVALID_COMPOUND_REASON))
        if verdict is FilterVerdict.SMALL_TALK:
            logger.debug(f"Small talk: '{cleaned}'")
            return MatchDecision(result=Conversational(response_text=SMALL_TALK_RESPONSE))
        return None

    def _score_and_select(self, bot_id: str, intake: MessageIntake) -> MatchDecision:
        cleaned = strip_mentions(intake.text)
        candidates = self.scorer.score_all(cleaned, self.catalog.get(bot_id))
        return self.selector.select(
            cleaned, candidates, mentions=intake.mentions, raw_text=intake.text
        )

    # ------------------------------------------------------------------
    # Full flow
    # ------------------------------------------------------------------

    async def process_message(self, bot_id: str, intake: MessageIntake) -> MatchResult:
        """
        Route a message through the full pipeline.

        Args:
            bot_id: Bot whose catalog is used
            intake: Incoming message

        Returns:
            Execute, Clarify, Conversational or Rejected
        """
        start = time.perf_counter()

        self.conversations.record_message(
            intake.author_id,
            intake.channel_id,
            MessageRecord(
                message_id=intake.message_id or "",
                content=intake.text,
                author=intake.author_name or intake.author_id,
                is_bot=False,
            ),
        )

        path = "filter"
        score = 0.0
        cost = 0.0
        result: Optional[MatchResult] = None

        if self.catalog.get(bot_id):
            result = self._follow_up(bot_id, intake)
            if result is not None:
                path = "followup"

        if result is None:
            early = self._prefilter(bot_id, intake)
            if early is not None:
                result = early.result

        if result is None and self.analyzer is not None:
            result, score, cost = await self._analyze(bot_id, intake)
            if result is not None:
                path = "ai"

        if result is None:
            decision = self._score_and_select(bot_id, intake)
            result, score, path = decision.result, decision.score, "heuristic"
            if isinstance(result, Clarify) and decision.candidate is not None:
                self._remember_clarification(
                    intake, result, decision.candidate.extracted_params, decision.score
                )

        if isinstance(result, Execute):
            score = result.confidence

        latency_ms = (time.perf_counter() - start) * 1000
        self.metrics.record_decision(
            route=result.kind, path=path, score=score, latency_ms=latency_ms, cost_usd=cost
        )
        logger.info(
            f"Bot {bot_id} user {intake.author_id}: {result.kind} via {path} "
            f"({latency_ms:.1f} ms)"
        )
        return result

    def record_bot_message(
        self,
        user_id: str,
        channel_id: str,
        message_id: str,
        content: str,
        author: str = "bot"
    ) -> None:
        """Remember a message the bot sent in a conversation (for reply context)."""
        self.conversations.record_message(
            user_id,
            channel_id,
            MessageRecord(message_id=message_id, content=content, author=author, is_bot=True),
        )

    def reply_context(self, intake: MessageIntake) -> Optional[str]:
        """Context string for a message that replies to an earlier one."""
        if intake.reference_message_id:
            record = self.conversations.find_message(
                intake.author_id, intake.channel_id, intake.reference_message_id
            )
            if record is not None:
                return f'Previous message context: {record.author}: "{record.content}"'
        return intake.conversation_context

    # ------------------------------------------------------------------
    # Clarification
    # ------------------------------------------------------------------

    def _follow_up(self, bot_id: str, intake: MessageIntake) -> Optional[MatchResult]:
        """Continue a pending clarification; None means match the message afresh."""
        state = self.conversations.get(intake.author_id, intake.channel_id)
        if state is None or state.pending_command is None:
            return None

        pending = state.pending_command
        entry = self.catalog.find(bot_id, pending.command_name)
        if entry is None:
            self.conversations.resolve(intake.author_id, intake.channel_id)
            return None

        cleaned = strip_mentions(intake.text)
        if self._names_other_command(bot_id, cleaned, entry):
            self.conversations.resolve(intake.author_id, intake.channel_id)
            return None

        reply = self.replies.classify(cleaned)
        if reply is ReplyKind.NEGATIVE:
            self.conversations.resolve(intake.author_id, intake.channel_id)
            logger.info(f"User {intake.author_id} cancelled /{entry.command_name}")
            return Conversational(
                response_text=f"Okay, I won't run /{entry.command_name}."
            )

        params = dict(pending.params)
        missing = self.selector.missing_slots(entry, params)
        filled = self.extractor.extract(missing, intake.text, intake.mentions)
        filled = {slot: value for slot, value in filled.items() if value}
        params.update(filled)

        still_missing = self.selector.missing_slots(entry, params)
        if not still_missing and (filled or reply is ReplyKind.AFFIRMATIVE):
            self.conversations.resolve(intake.author_id, intake.channel_id)
            return self.selector.decide(entry, params, pending.confidence)

        if reply is ReplyKind.AFFIRMATIVE:
            question = self.selector.clarification_question(entry, still_missing)
            self.conversations.set_pending(
                intake.author_id,
                intake.channel_id,
                entry.command_name,
                params,
                question,
                state.original_message or intake.text,
                confidence=pending.confidence,
            )
            return Clarify(question=question, command_name=entry.command_name)

        self.conversations.resolve(intake.author_id, intake.channel_id)
        return None

    def _names_other_command(self, bot_id: str, cleaned: str, entry: CatalogEntry) -> bool:
        lowered = cleaned.lower()
        return any(
            other.command_name != entry.command_name
            and self.scorer.direct_name_score(lowered, other.command_name.lower()) > 0
            for other in self.catalog.get(bot_id)
        )

    def _remember_clarification(
        self,
        intake: MessageIntake,
        result: Clarify,
        params: Dict[Slot, str],
        confidence: float = 0.0
    ) -> None:
        if result.command_name is None:
            return
        self.conversations.set_pending(
            intake.author_id,
            intake.channel_id,
            result.command_name,
            {slot: value for slot, value in params.items() if value},
            result.question,
            intake.text,
            confidence=confidence,
        )

    # ------------------------------------------------------------------
    # AI path
    # ------------------------------------------------------------------

    async def _analyze(self, bot_id: str, intake: MessageIntake) -> tuple[Optional[MatchResult], float, float]:
        """Route with the AI collaborator; a None result means use the heuristics."""
        entries = self.catalog.get(bot_id)
        outcome = await self.analyzer.analyze(
            strip_mentions(intake.text),
            entries,
            context=self.reply_context(intake),
            mentioned_user_ids=[u for u in intake.mentioned_user_ids if u != intake.bot_user_id],
        )

        if isinstance(outcome, AiUnavailable):
            self.metrics.record_ai_unavailable()
            return None, 0.0, 0.0

        analysis: AiAnalysis = outcome
        if not analysis.is_command:
            return Conversational(
                response_text=analysis.response or SMALL_TALK_RESPONSE
            ), analysis.confidence, analysis.cost_usd

        entry = self.catalog.find(bot_id, analysis.command or "")
        if entry is None:
            return None, 0.0, analysis.cost_usd

        params = self.extractor.extract(entry.all_slots, intake.text, intake.mentions)
        params = {slot: value for slot, value in params.items() if value}
        params.update(analysis.slot_params())

        if analysis.confidence < self.config.ai_min_confidence:
            question = analysis.clarification_question or (
                f"Did you mean to {entry.command_name}? Please confirm or provide more details."
            )
            result: MatchResult = Clarify(question=question, command_name=entry.command_name)
        else:
            result = self.selector.decide(entry, params, analysis.confidence)

        if isinstance(result, Clarify):
            self._remember_clarification(intake, result, params, analysis.confidence)
        return result, analysis.confidence, analysis.cost_usd

    def get_catalog(self, bot_id: str) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.catalog.get(bot_id)]
