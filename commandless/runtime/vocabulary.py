"""
Static vocabulary tables used by pattern generation, filtering and scoring.

The tables are plain data keyed by common command names. Matching
functions receive a Vocabulary instance instead of reading module globals,
so a test (or a deployment) can swap any table without touching code.

Copyright (c) 2025 Graziano Labs Corp.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple


ACTION_ALTERNATIVES: Dict[str, List[str]] = {
    "ban": ["kick out", "remove", "banish"],
    "kick": ["remove", "boot", "eject"],
    "mute": ["silence", "quiet"],
    "unmute": ["unsilence", "allow speaking"],
    "warn": ["caution", "alert"],
    "timeout": ["time out", "temporarily mute"],
    "role": ["give role", "assign role"],
    "nick": ["nickname", "rename"],
    "avatar": ["profile picture", "pfp"],
    "channel": ["create channel", "make channel"],
    "delete": ["remove", "destroy"],
    "clear": ["purge", "clean"],
    "lock": ["lockdown", "restrict"],
    "unlock": ["open", "unrestrict"],
}

PHRASE_PATTERNS: Dict[str, List[str]] = {
    "ban": [
        "please remove", "can you remove", "get rid of", "kick out",
        "ban them", "remove them", "they need to go", "take them out",
        "eliminate user", "delete user", "boot them", "yeet them",
    ],
    "kick": [
        "kick them out", "boot them", "throw them out", "remove temporarily",
        "get them out of here", "make them leave",
    ],
    "warn": [
        "give warning", "issue warning", "warn them", "tell them off",
        "let them know", "give them warning", "issue them warning",
    ],
    "mute": [
        "silence them", "make them quiet", "shut them up", "time them out",
        "timeout user", "stop them talking", "prevent them speaking",
    ],
    "ping": [
        "how fast", "how quick", "response time", "check speed", "test ping",
        "check latency", "what is ping", "how responsive", "speed test",
        "performance check", "reaction time", "how fast is", "speed of",
    ],
    "say": [
        "tell everyone", "announce to all", "let everyone know", "inform all",
        "broadcast message", "share with everyone", "make announcement",
    ],
    "purge": [
        "delete messages", "clear messages", "clean up messages", "remove messages",
        "clear chat", "clean chat", "wipe messages", "get rid of messages",
    ],
    "pin": [
        "pin this message", "stick this", "pin the message", "keep this visible",
        "make this permanent", "attach this message", "save this message",
    ],
    "note": [
        "make note", "add note", "take note", "write down", "record this",
        "remember this", "document this", "keep track of",
    ],
    "role": [
        "give role", "add role", "assign role", "make admin", "promote to",
        "give permissions", "assign permissions", "grant role",
    ],
}

SEMANTIC_KEYWORDS: Dict[str, List[str]] = {
    "warn": [
        "warn", "warning", "caution", "alert", "notify",
        "give warning", "issue warning", "send warning", "warn them",
        "tell them", "let them know", "inform them", "remind them",
    ],
    "ban": [
        "ban", "remove", "banish", "exile", "expel", "eject", "delete",
        "kick out", "get rid of", "throw out", "boot out", "yeet",
        "remove them", "get them out", "make them leave", "eliminate",
        "take them out", "remove from server", "ban from server",
    ],
    "kick": [
        "kick", "boot", "eject", "throw out", "remove temporarily",
        "kick out", "boot them", "throw them out",
        "make them leave temporarily", "remove for now",
    ],
    "mute": [
        "mute", "silence", "timeout", "quiet", "shush", "hush",
        "time out", "shut up", "make quiet", "silence them",
        "stop them talking", "prevent them speaking", "calm them down",
    ],
    "note": [
        "note", "record", "remember", "document", "write", "log",
        "make note", "add note", "take note", "write down",
        "keep track", "make record", "document this", "remember that",
    ],
    "say": [
        "say", "tell", "announce", "broadcast", "declare", "proclaim",
        "tell everyone", "let everyone know", "make announcement",
        "inform everyone", "share with everyone", "communicate to all",
    ],
    "purge": [
        "purge", "delete", "clear", "clean", "remove", "wipe",
        "clean up", "get rid of", "clear out", "delete messages",
        "remove messages", "clean messages", "clear chat",
    ],
    "pin": [
        "pin", "stick", "attach", "fix", "secure", "fasten",
        "pin message", "stick message", "pin this", "pin above",
        "keep this visible", "make this permanent", "save this message",
    ],
    "ping": [
        "ping", "latency", "speed", "delay", "lag",
        "response", "fast", "quick", "time", "ms", "milliseconds",
        "how fast", "how quick", "response time", "reaction time",
        "check speed", "test speed", "check latency", "test ping",
        "how responsive", "performance check", "speed test",
    ],
    "role": [
        "role", "permission", "rank", "status", "position",
        "give", "add", "assign", "grant", "promote", "elevate",
        "admin", "moderator", "mod", "member", "user", "vip",
        "give role", "add role", "assign role", "make admin",
        "promote to", "give permissions", "make them", "assign them",
    ],
    "slowmode": [
        "slowmode", "slow", "rate", "limit", "throttle", "restrict",
        "slow down", "rate limit", "limit messages", "restrict chat",
        "make slower", "reduce speed", "control rate",
    ],
}

GREETING_PATTERNS: Tuple[str, ...] = (
    r"^(hello|hi|hey|yo|good morning|good afternoon|good evening|greetings)\b",
    r"\bhow are you\b",
    r"\bhow's it going\b",
    r"\bwhat'?s up\b",
    r"\bsup\b",
    r"^(thanks|thank you|thx|ty)\b",
    r"^(bye|goodbye|see you|cya|good night)\b",
    r"^(ok|okay|cool|nice|lol|great)[.!]*$",
)

COMMAND_INTENT_VERBS: FrozenSet[str] = frozenset({
    "warn", "ban", "kick", "mute", "timeout", "remove", "delete", "purge",
    "pin", "say", "note", "role", "slowmode", "ping", "latency", "speed",
})

COMPOUND_VERBS: FrozenSet[str] = frozenset({
    "warn", "ban", "kick", "mute", "timeout", "purge", "pin", "say", "note",
})

NATURAL_LANGUAGE_INDICATORS: Tuple[str, ...] = (
    "please", "can you", "could you", "would you", "how", "what", "why",
    "they are", "user is", "being", "getting", "remove them", "get rid",
)

MODERATION_COMMANDS: FrozenSet[str] = frozenset({
    "ban", "kick", "mute", "warn", "timeout", "role",
})

# Function words that never count as a partial phrase hit
PHRASE_STOPWORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "is", "are", "was", "of", "to", "it", "me", "my", "up",
    "and", "for", "with", "you", "your", "them", "they", "this", "that",
    "what", "how", "can", "all", "out", "here",
})


@dataclass
class Vocabulary:
    """Bundle of lookup tables consulted by the matching pipeline."""
    action_alternatives: Dict[str, List[str]] = field(default_factory=lambda: dict(ACTION_ALTERNATIVES))
    phrase_patterns: Dict[str, List[str]] = field(default_factory=lambda: dict(PHRASE_PATTERNS))
    semantic_keywords: Dict[str, List[str]] = field(default_factory=lambda: dict(SEMANTIC_KEYWORDS))
    greeting_patterns: Tuple[str, ...] = GREETING_PATTERNS
    command_intent_verbs: FrozenSet[str] = COMMAND_INTENT_VERBS
    compound_verbs: FrozenSet[str] = COMPOUND_VERBS
    natural_language_indicators: Tuple[str, ...] = NATURAL_LANGUAGE_INDICATORS
    moderation_commands: FrozenSet[str] = MODERATION_COMMANDS
    phrase_stopwords: FrozenSet[str] = PHRASE_STOPWORDS

    def alternatives_for(self, command_name: str) -> List[str]:
        return self.action_alternatives.get(command_name.lower(), [])

    def phrases_for(self, command_name: str) -> List[str]:
        return self.phrase_patterns.get(command_name.lower(), [])

    def keywords_for(self, command_name: str) -> List[str]:
        """Synonym list for a command; unknown commands fall back to their own name."""
        return self.semantic_keywords.get(command_name.lower(), [command_name.lower()])


DEFAULT_VOCABULARY = Vocabulary()
