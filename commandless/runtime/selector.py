"""
Match selection and routing results.

Picks the best scored catalog entry, applies the acceptance threshold and
turns the outcome into one of four results: Execute, Clarify,
Conversational or Rejected.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence

from .matcher import MatchCandidate
from .patterns import CatalogEntry
from .slot_extractors import MentionData, ParameterExtractor
from .slots import Slot
from .templates import CommandRenderer
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATIONAL_RESPONSE = (
    "I'm here and ready to help! Feel free to ask me anything or give me a command."
)

SLOT_QUESTIONS: Dict[Slot, str] = {
    Slot.USER: "which user",
    Slot.REASON: "what the reason is",
    Slot.MESSAGE: "what message to use",
    Slot.AMOUNT: "how many",
    Slot.DURATION: "for how long",
    Slot.ROLE: "which role",
    Slot.CHANNEL: "which channel",
    Slot.NAME: "what name to use",
}


# ============================================================================
# Results
# ============================================================================

@dataclass
class MatchResult:
    """Base of the four routing outcomes."""
    kind: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind}
        data.update(self.__dict__)
        return data


@dataclass
class Execute(MatchResult):
    """Run a rendered command."""
    rendered_command: str
    command_name: str
    params: Dict[str, str] = field(default_factory=dict)
    confidence: float = 0.0
    kind: ClassVar[str] = "execute"


@dataclass
class Clarify(MatchResult):
    """Ask the user for missing information."""
    question: str
    command_name: Optional[str] = None
    kind: ClassVar[str] = "clarify"


@dataclass
class Conversational(MatchResult):
    """Reply in plain chat; no command."""
    response_text: str
    kind: ClassVar[str] = "conversational"


@dataclass
class Rejected(MatchResult):
    """Input that must never run a command."""
    reason: str
    kind: ClassVar[str] = "rejected"


@dataclass
class MatchDecision:
    """Routing result plus the evidence behind it."""
    result: MatchResult
    candidate: Optional[MatchCandidate] = None
    threshold: Optional[float] = None
    candidates: List[MatchCandidate] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return self.result.kind

    @property
    def score(self) -> float:
        return self.candidate.aggregate_score if self.candidate else 0.0


# ============================================================================
# Selector
# ============================================================================

class MatchSelector:
    """
    Choose between Execute, Clarify and Conversational for scored candidates.

    - Highest aggregate score wins; ties keep the first-seen entry
    - Natural-language input uses the lower threshold
    - A score at or above the threshold is accepted
    - Missing required slots turn an accepted match into a clarification
    """

    def __init__(
        self,
        extractor: Optional[ParameterExtractor] = None,
        renderer: Optional[CommandRenderer] = None,
        vocabulary: Optional[Vocabulary] = None,
        natural_language_threshold: float = 0.15,
        default_threshold: float = 0.25
    ):
        self.extractor = extractor or ParameterExtractor()
        self.renderer = renderer or CommandRenderer()
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self.natural_language_threshold = natural_language_threshold
        self.default_threshold = default_threshold

    def is_natural_language(self, text: str) -> bool:
        lowered = text.lower()
        return any(indicator in lowered for indicator in self.vocabulary.natural_language_indicators)

    def threshold_for(self, text: str) -> float:
        if self.is_natural_language(text):
            return self.natural_language_threshold
        return self.default_threshold

    def best_candidate(self, candidates: Sequence[MatchCandidate]) -> Optional[MatchCandidate]:
        best: Optional[MatchCandidate] = None
        for candidate in candidates:
            if best is None or candidate.aggregate_score > best.aggregate_score:
                best = candidate
        return best

    def select(
        self,
        text: str,
        candidates: Sequence[MatchCandidate],
        mentions: Optional[MentionData] = None,
        raw_text: Optional[str] = None
    ) -> MatchDecision:
        """
        Route scored candidates.

        Args:
            text: Message text the candidates were scored on
            candidates: Scored catalog entries in catalog order
            mentions: Structured mentions of the message
            raw_text: Message text with mention markup (defaults to text)

        Returns:
            MatchDecision with the routing result
        """
        threshold = self.threshold_for(text)
        best = self.best_candidate(candidates)

        if best is None or best.aggregate_score < threshold:
            score = best.aggregate_score if best else 0.0
            logger.info(f"No command above threshold {threshold} (best={score:.3f})")
            return MatchDecision(
                result=Conversational(response_text=DEFAULT_CONVERSATIONAL_RESPONSE),
                candidate=best,
                threshold=threshold,
                candidates=list(candidates),
            )

        best.extracted_params = self.extractor.extract(
            best.entry.all_slots, raw_text or text, mentions
        )
        result = self.decide(best.entry, best.extracted_params, best.aggregate_score)

        logger.info(
            f"Matched /{best.entry.command_name} score={best.aggregate_score:.3f} "
            f"threshold={threshold} -> {result.kind}"
        )
        return MatchDecision(
            result=result,
            candidate=best,
            threshold=threshold,
            candidates=list(candidates),
        )

    def decide(
        self,
        entry: CatalogEntry,
        params: Dict[Slot, str],
        confidence: float
    ) -> MatchResult:
        """Execute when every required slot has a value, else Clarify."""
        missing = self.missing_slots(entry, params)
        if missing:
            return Clarify(
                question=self.clarification_question(entry, missing),
                command_name=entry.command_name,
            )

        return Execute(
            rendered_command=self.renderer.render(entry.output_template, params),
            command_name=entry.command_name,
            params={slot.value: value for slot, value in params.items() if value},
            confidence=round(min(max(confidence, 0.0), 1.0), 3),
        )

    def missing_slots(self, entry: CatalogEntry, params: Dict[Slot, str]) -> List[Slot]:
        return [
            slot for slot in sorted(entry.required_slots, key=lambda s: s.value)
            if not (params.get(slot) or "").strip()
        ]

    def clarification_question(self, entry: CatalogEntry, missing: Sequence[Slot]) -> str:
        wanted = [SLOT_QUESTIONS.get(slot, slot.value) for slot in missing]
        if len(wanted) > 1:
            needed = ", ".join(wanted[:-1]) + " and " + wanted[-1]
        else:
            needed = wanted[0]
        return f"I can run /{entry.command_name} for you, but I need to know {needed}. Could you tell me?"
