"""
Conversational filter: a cheap gate that runs before any scoring.

Rejects small talk (greetings, farewells, acknowledgements) that carries
no command-intent keyword, and invalid compound verbs such as "warnban".

Copyright (c) 2025 Graziano Labs Corp.
"""

import re
from enum import Enum
from typing import Iterable, Optional, Set

from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

MENTION_RE = re.compile(r"<(?:@[!&]?|#)\d+>")
WORD_RE = re.compile(r"[a-z0-9']+")

MIN_COMPOUND_PART = 3


class FilterVerdict(Enum):
    """Outcome of the conversational filter"""
    PASS = "pass"
    SMALL_TALK = "small_talk"
    INVALID_COMPOUND = "invalid_compound"


def strip_mentions(text: str) -> str:
    """Remove user/channel/role mention markup and collapse whitespace."""
    return " ".join(MENTION_RE.sub(" ", text).split())


def tokenize(text: str) -> list[str]:
    return WORD_RE.findall(text.lower())


class ConversationalFilter:
    """Boolean pre-check deciding whether text can be a command at all."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._greetings = [re.compile(p, re.I) for p in self.vocabulary.greeting_patterns]

    def check(self, text: str, command_names: Iterable[str] = ()) -> FilterVerdict:
        """
        Classify text before scoring.

        Args:
            text: Message text with mentions already stripped
            command_names: Command names of the bot's catalog

        Returns:
            FilterVerdict.PASS when scoring should proceed
        """
        names = {name.lower() for name in command_names}
        if self.is_invalid_compound(text, names):
            return FilterVerdict.INVALID_COMPOUND
        if self.is_small_talk(text, names):
            return FilterVerdict.SMALL_TALK
        return FilterVerdict.PASS

    def is_small_talk(self, text: str, command_names: Iterable[str] = ()) -> bool:
        """True for a greeting/farewell/acknowledgement without command intent."""
        lowered = text.strip().lower()
        if not any(p.search(lowered) for p in self._greetings):
            return False
        return not self.has_command_intent(lowered, command_names)

    def has_command_intent(self, text: str, command_names: Iterable[str] = ()) -> bool:
        words = set(tokenize(text))
        lowered = text.lower()
        for name in command_names:
            name = name.lower()
            if name in words:
                return True
            spaced = re.sub(r"[-_]+", " ", name)
            if " " in spaced and spaced in lowered:
                return True
        return bool(words & self.vocabulary.command_intent_verbs)

    def is_invalid_compound(self, text: str, command_names: Iterable[str] = ()) -> bool:
        """True when a token glues two distinct command verbs together, e.g. "warnban"."""
        names: Set[str] = {name.lower() for name in command_names}
        verbs = self.vocabulary.compound_verbs

        for token in tokenize(text):
            if token in names or token in verbs:
                continue
            for cut in range(MIN_COMPOUND_PART, len(token) - MIN_COMPOUND_PART + 1):
                left, right = token[:cut], token[cut:]
                if left != right and left in verbs and right in verbs:
                    return True
        return False
