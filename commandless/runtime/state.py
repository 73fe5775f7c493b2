"""
Conversation state for multi-turn clarification.

Keeps, per (user, channel) pair, the command awaiting a clarification
answer and a small ring buffer of recent messages used to build reply
context. Entries expire after a TTL (purged lazily on access) and the
store is capped in size with least-recently-used eviction.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, Dict, List, Optional, Tuple

from .slots import Slot

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 7200
DEFAULT_MAX_ENTRIES = 10000
DEFAULT_BUFFER_SIZE = 10

ConversationKey = Tuple[str, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MessageRecord:
    """One message seen in a conversation"""
    message_id: str
    content: str
    author: str
    is_bot: bool = False
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class PendingCommand:
    """A matched command waiting for its missing slots"""
    command_name: str
    params: Dict[Slot, str] = field(default_factory=dict)
    confidence: float = 0.0


@dataclass
class ConversationState:
    """State of one (user, channel) conversation"""
    user_id: str
    channel_id: str
    updated_at: datetime
    clarification_question: Optional[str] = None
    pending_command: Optional[PendingCommand] = None
    original_message: Optional[str] = None
    messages: Deque[MessageRecord] = field(
        default_factory=lambda: deque(maxlen=DEFAULT_BUFFER_SIZE)
    )

    @property
    def awaiting_clarification(self) -> bool:
        return self.pending_command is not None


class ConversationStore:
    """
    In-memory conversation store.

    Provides:
    - Pending clarification per (user, channel)
    - Recent-message ring buffer for reply context
    - Lazy TTL expiry and an LRU capacity cap

    Writes are last-write-wins; the store is meant to be used from a
    single event loop.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize conversation store.

        Args:
            ttl_seconds: Time to live of an idle conversation
            max_entries: Capacity; least recently used entries are evicted (0 = unbounded)
            buffer_size: Messages kept per conversation
            clock: Returns the current time (injectable for tests)
        """
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_entries = max_entries
        self.buffer_size = buffer_size
        self.clock = clock or _utcnow
        self._states: "OrderedDict[ConversationKey, ConversationState]" = OrderedDict()

    def get(self, user_id: str, channel_id: str) -> Optional[ConversationState]:
        """Return the live state of a conversation, or None if absent or expired."""
        key = (user_id, channel_id)
        state = self._states.get(key)
        if state is None:
            return None

        if self._is_expired(state):
            logger.debug(f"Conversation {key} expired")
            del self._states[key]
            return None

        self._states.move_to_end(key)
        return state

    def set_pending(
        self,
        user_id: str,
        channel_id: str,
        command_name: str,
        params: Dict[Slot, str],
        question: str,
        original_message: str,
        confidence: float = 0.0
    ) -> ConversationState:
        """Remember a command that is waiting for a clarification answer."""
        state = self._get_or_create(user_id, channel_id)
        state.pending_command = PendingCommand(
            command_name=command_name, params=dict(params), confidence=confidence
        )
        state.clarification_question = question
        state.original_message = original_message
        state.updated_at = self.clock()
        logger.info(f"Awaiting clarification for /{command_name} from {user_id} in {channel_id}")
        return state

    def resolve(self, user_id: str, channel_id: str) -> Optional[PendingCommand]:
        """Clear the pending clarification and return it (message buffer is kept)."""
        state = self.get(user_id, channel_id)
        if state is None or state.pending_command is None:
            return None

        pending = state.pending_command
        state.pending_command = None
        state.clarification_question = None
        state.original_message = None
        state.updated_at = self.clock()
        return pending

    def delete(self, user_id: str, channel_id: str) -> None:
        self._states.pop((user_id, channel_id), None)

    def record_message(self, user_id: str, channel_id: str, record: MessageRecord) -> None:
        """Append a message to the conversation's ring buffer."""
        state = self._get_or_create(user_id, channel_id)
        state.messages.append(record)
        state.updated_at = self.clock()

    def find_message(self, user_id: str, channel_id: str, message_id: str) -> Optional[MessageRecord]:
        state = self.get(user_id, channel_id)
        if state is None:
            return None
        for record in reversed(state.messages):
            if record.message_id == message_id:
                return record
        return None

    def recent_messages(
        self,
        user_id: str,
        channel_id: str,
        limit: Optional[int] = None
    ) -> List[MessageRecord]:
        """Most recent messages, oldest first."""
        state = self.get(user_id, channel_id)
        if state is None:
            return []
        records = list(state.messages)
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records

    def evict_expired(self) -> int:
        """Remove expired conversations, return count removed"""
        expired = [key for key, state in self._states.items() if self._is_expired(state)]
        for key in expired:
            del self._states[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired conversation(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._states)

    def _get_or_create(self, user_id: str, channel_id: str) -> ConversationState:
        state = self.get(user_id, channel_id)
        if state is not None:
            return state

        key = (user_id, channel_id)
        state = ConversationState(
            user_id=user_id,
            channel_id=channel_id,
            updated_at=self.clock(),
            messages=deque(maxlen=self.buffer_size),
        )
        self._states[key] = state

        if self.max_entries and len(self._states) > self.max_entries:
            evicted, _ = self._states.popitem(last=False)
            logger.debug(f"Conversation store full, evicted {evicted}")
        return state

    def _is_expired(self, state: ConversationState) -> bool:
        return self.clock() - state.updated_at > self.ttl
