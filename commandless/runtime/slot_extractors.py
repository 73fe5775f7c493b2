"""
Parameter extraction for canonical slots.

Each slot is filled by an ordered list of regex rules (first match wins)
plus, for some slots, a keyword scan or structured mention data supplied
by the chat platform. Extraction never raises: a slot with no match gets
an empty string and the Match Selector decides what that means.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Pattern

from .firewall import MENTION_RE, strip_mentions
from .slots import Slot

logger = logging.getLogger(__name__)


# ============================================================================
# Inputs
# ============================================================================

@dataclass
class MentionData:
    """Structured mentions delivered with a message.

    Attributes:
        user_ids: Mentioned users in message order
        channel_ids: Mentioned channels in message order
        role_ids: Mentioned roles in message order
        bot_user_id: The bot's own user id (never a target)
    """
    user_ids: List[str] = field(default_factory=list)
    channel_ids: List[str] = field(default_factory=list)
    role_ids: List[str] = field(default_factory=list)
    bot_user_id: Optional[str] = None


# ============================================================================
# Rules
# ============================================================================

@dataclass(frozen=True)
class ExtractionRule:
    """One (slot, pattern) rule; group 1 of the pattern is the value."""
    slot: Slot
    pattern: Pattern
    transform: Optional[Callable[[re.Match], str]] = None

    def apply(self, text: str) -> str:
        match = self.pattern.search(text)
        if not match:
            return ""
        if self.transform is not None:
            return self.transform(match)
        return (match.group(1) or "").strip()


def _rule(slot: Slot, pattern: str, transform=None) -> ExtractionRule:
    return ExtractionRule(slot, re.compile(pattern, re.I), transform)


def _duration_value(match: re.Match) -> str:
    return f"{int(match.group(1))}{match.group(2)[0].lower()}"


REASON_RULES = [
    _rule(Slot.REASON, r"\b(?:(?:for|because|due to)\s+|reason:\s*)(.+)$"),
    _rule(Slot.REASON, r"\b(?:they|user)\s+(?:keep|keeps|is|are|was|were)\s+(.+)$"),
    _rule(Slot.REASON, r"\b(?:being|getting)\s+(.+)$"),
    _rule(Slot.REASON, r"\b(?:since|as)\s+(?:they|user|he|she)\s+(.+)$"),
    _rule(Slot.REASON, r"\b(?:they|user|he|she)\s+(?:has been|have been)\s+(.+)$"),
    _rule(Slot.REASON, r"\bcaught\s+(.+)$"),
    _rule(Slot.REASON, r"\b(?:they're|theyre)\s+(.+)$"),
    _rule(Slot.REASON, r"\b(?:keeps?|always|constantly|continuously)\s+(.+)$"),
]

MESSAGE_RULES = [
    _rule(Slot.MESSAGE, r'"([^"]+)"'),
    _rule(Slot.MESSAGE, r"'([^']+)'"),
    _rule(Slot.MESSAGE, r"\b(?:note|message):\s*(.+)$"),
    _rule(Slot.MESSAGE, r"\b(?:say|tell|announce|note|message)\s+(.+)$"),
]

AMOUNT_RULES = [
    _rule(Slot.AMOUNT, r"\b(\d+)\s*(?:messages?|msgs?)\b"),
    _rule(Slot.AMOUNT, r"\b(?:about|around|approximately)\s*(\d+)\b"),
    _rule(Slot.AMOUNT, r"\b(\d+)\b"),
]

DURATION_RULES = [
    _rule(
        Slot.DURATION,
        r"\b(\d+)\s*(seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h|days?|d)\b",
        _duration_value,
    ),
]

ROLE_RULES = [
    _rule(Slot.ROLE, r"\b(?:give|add|assign|grant)\s+(?:them\s+|him\s+|her\s+)?(?:the\s+)?(.+?)\s+(?:role|admin|permissions)\b"),
]

NAME_RULES = [
    _rule(Slot.NAME, r'"([^"]+)"'),
    _rule(Slot.NAME, r"'([^']+)'"),
    _rule(Slot.NAME, r"\b(?:named|called|titled)\s+(.+)$"),
]

RULES: Dict[Slot, List[ExtractionRule]] = {
    Slot.REASON: REASON_RULES,
    Slot.MESSAGE: MESSAGE_RULES,
    Slot.AMOUNT: AMOUNT_RULES,
    Slot.DURATION: DURATION_RULES,
    Slot.ROLE: ROLE_RULES,
    Slot.NAME: NAME_RULES,
}

BEHAVIOUR_KEYWORDS = [
    "toxic", "spamming", "harassment", "trolling", "annoying",
    "rude", "inappropriate", "disruptive", "offensive", "abusive",
]

WORD_NUMBERS = {
    "one": "1", "two": "2", "three": "3", "four": "4", "five": "5",
    "six": "6", "seven": "7", "eight": "8", "nine": "9", "ten": "10",
    "fifteen": "15", "twenty": "20", "thirty": "30", "fifty": "50",
}

COMMON_ROLES = ["admin", "moderator", "mod", "member", "user", "vip"]

_REASON_PREFIX = re.compile(r"^(?:are|is|was|were|being|getting|doing)\s+", re.I)
_MIN_REASON_LENGTH = 3


def run_rules(rules: Iterable[ExtractionRule], text: str) -> str:
    """Evaluate rules in order; first non-empty value wins."""
    for rule in rules:
        value = rule.apply(text)
        if value:
            return value
    return ""


# ============================================================================
# Extractor
# ============================================================================

class ParameterExtractor:
    """Extract canonical slot values from a message.

    Example:
        extractor = ParameterExtractor()
        params = extractor.extract(
            {Slot.USER, Slot.REASON},
            "warn <@42> for spamming",
            MentionData(user_ids=["42"]),
        )
        # {Slot.USER: "42", Slot.REASON: "spamming"}
    """

    def __init__(self, rules: Optional[Dict[Slot, List[ExtractionRule]]] = None):
        self.rules = rules if rules is not None else RULES

    def extract(
        self,
        slots: Iterable[Slot],
        text: str,
        mentions: Optional[MentionData] = None
    ) -> Dict[Slot, str]:
        """
        Extract a value for every requested slot.

        Args:
            slots: Slots referenced by the winning entry
            text: Raw message text (mention markup allowed)
            mentions: Structured mention lists from the platform

        Returns:
            Mapping of slot to value; empty string when nothing matched
        """
        mentions = mentions or MentionData()
        cleaned = strip_mentions(text)
        params = {}
        for slot in slots:
            params[slot] = self.extract_slot(slot, text, cleaned, mentions)
        logger.debug(f"Extracted params: {[(s.value, v) for s, v in params.items()]}")
        return params

    def extract_slot(
        self,
        slot: Slot,
        raw_text: str,
        cleaned: str,
        mentions: MentionData
    ) -> str:
        if slot is Slot.USER:
            return self.extract_user(raw_text, mentions)
        if slot is Slot.CHANNEL:
            return mentions.channel_ids[0] if mentions.channel_ids else ""
        if slot is Slot.REASON:
            return self.extract_reason(cleaned)
        if slot is Slot.AMOUNT:
            return self.extract_amount(cleaned)
        if slot is Slot.ROLE:
            return self.extract_role(cleaned, mentions)
        return run_rules(self.rules.get(slot, []), cleaned)

    def extract_user(self, raw_text: str, mentions: MentionData) -> str:
        """First mentioned user that is not the bot.

        With several candidates, a mention that opens the message is assumed
        to address the bot and is skipped.
        """
        candidates = [uid for uid in mentions.user_ids if uid and uid != mentions.bot_user_id]
        if not candidates:
            return ""
        if len(candidates) > 1:
            tokens = raw_text.strip().split()
            first = tokens[0] if tokens else ""
            if MENTION_RE.fullmatch(first) and re.sub(r"\D", "", first) == candidates[0]:
                return candidates[1]
        return candidates[0]

    def extract_reason(self, text: str) -> str:
        for rule in self.rules.get(Slot.REASON, []):
            value = _REASON_PREFIX.sub("", rule.apply(text)).strip()
            if len(value) >= _MIN_REASON_LENGTH:
                return value

        lowered = text.lower()
        for keyword in BEHAVIOUR_KEYWORDS:
            if keyword in lowered:
                return keyword
        return ""

    def extract_amount(self, text: str) -> str:
        value = run_rules(self.rules.get(Slot.AMOUNT, []), text)
        if value:
            return value

        words = set(re.findall(r"[a-z]+", text.lower()))
        for word, number in WORD_NUMBERS.items():
            if word in words:
                return number
        return ""

    def extract_role(self, text: str, mentions: MentionData) -> str:
        if mentions.role_ids:
            return mentions.role_ids[0]

        value = run_rules(self.rules.get(Slot.ROLE, []), text)
        if value:
            return value

        words = set(re.findall(r"[a-z]+", text.lower()))
        for role in COMMON_ROLES:
            if role in words:
                return role
        return ""
