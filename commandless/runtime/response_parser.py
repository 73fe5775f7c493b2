"""
Confirmation reply parsing for clarification follow-ups.

Classifies a user's follow-up message as an affirmative answer, a
negative answer, or anything else.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class ReplyKind(Enum):
    """Kinds of follow-up reply"""
    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"
    OTHER = "other"


AFFIRMATIVE_REPLIES: Tuple[str, ...] = (
    "yes", "yeah", "yep", "yup", "sure", "correct", "right", "absolutely",
    "confirm", "confirmed", "ok", "okay", "y", "ye", "ya", "yea", "indeed",
    "affirmative", "certainly", "definitely", "exactly", "👍", "yes please",
    "that's right", "that is right", "that's correct", "that is correct",
    "go ahead", "do it",
)

NEGATIVE_REPLIES: Tuple[str, ...] = (
    "no", "nope", "nah", "negative", "never", "not", "n", "wrong",
    "incorrect", "noo", "nooo", "no way", "definitely not", "absolutely not",
    "👎", "no thanks", "that's wrong", "that is wrong", "that's incorrect",
    "that is incorrect", "cancel", "nevermind", "never mind", "stop",
)


@dataclass
class ParsedReply:
    """Result of parsing a follow-up message"""
    original_reply: str
    kind: ReplyKind
    matched_phrase: Optional[str]


class ResponseParser:
    """Parses follow-up messages to detect yes/no answers"""

    def __init__(
        self,
        affirmative: Iterable[str] = AFFIRMATIVE_REPLIES,
        negative: Iterable[str] = NEGATIVE_REPLIES
    ):
        # Longest phrases first so "no way" wins over "no"
        self.affirmative = sorted(affirmative, key=len, reverse=True)
        self.negative = sorted(negative, key=len, reverse=True)

    def parse_reply(self, reply: str) -> ParsedReply:
        """
        Classify a follow-up message.

        A phrase matches when it is the whole message or its leading word(s)
        followed by a space. Negatives are checked first.

        Example:
            >>> ResponseParser().parse_reply("Nope, forget it").kind
            ReplyKind.NEGATIVE
        """
        normalized = " ".join(reply.strip().lower().split()).rstrip(".!")

        for kind, phrases in ((ReplyKind.NEGATIVE, self.negative),
                              (ReplyKind.AFFIRMATIVE, self.affirmative)):
            phrase = self._match(normalized, phrases)
            if phrase is not None:
                logger.debug(f"Reply '{reply}' classified as {kind.value} ('{phrase}')")
                return ParsedReply(original_reply=reply, kind=kind, matched_phrase=phrase)

        return ParsedReply(original_reply=reply, kind=ReplyKind.OTHER, matched_phrase=None)

    def classify(self, reply: str) -> ReplyKind:
        return self.parse_reply(reply).kind

    def is_affirmative(self, reply: str) -> bool:
        return self.classify(reply) is ReplyKind.AFFIRMATIVE

    def is_negative(self, reply: str) -> bool:
        return self.classify(reply) is ReplyKind.NEGATIVE

    def _match(self, normalized: str, phrases: Iterable[str]) -> Optional[str]:
        for phrase in phrases:
            if normalized == phrase:
                return phrase
            if normalized.startswith(phrase) and normalized[len(phrase):][:1] in (" ", ",", "!", "."):
                return phrase
        return None
