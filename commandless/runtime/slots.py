"""
Slot taxonomy and command-definition ingestion.

Every bot-specific option name is mapped onto one canonical Slot so that
patterns, extraction and rendering never depend on a particular bot's
vocabulary. Platform option records are converted into OptionType at the
ingestion boundary; nothing downstream looks at raw type codes.

Copyright (c) 2025 Graziano Labs Corp.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..errors import CatalogError


class Slot(str, Enum):
    """Canonical parameter roles."""
    USER = "user"
    REASON = "reason"
    MESSAGE = "message"
    AMOUNT = "amount"
    DURATION = "duration"
    ROLE = "role"
    CHANNEL = "channel"
    NAME = "name"

    @property
    def placeholder(self) -> str:
        return "{" + self.value + "}"


class OptionType(Enum):
    """Closed set of command option types (Discord application command codes)."""
    SUBCOMMAND = 1
    SUBCOMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11

    @classmethod
    def parse(cls, raw: Any) -> "OptionType":
        """Convert a numeric code, a name or an OptionType into OptionType.

        Raises:
            CatalogError: If the value is not a known option type
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            try:
                return cls(raw)
            except ValueError:
                pass
        elif isinstance(raw, str):
            key = raw.strip().upper().replace("-", "_").replace(" ", "_")
            if key.isdigit():
                return cls.parse(int(key))
            if key in cls.__members__:
                return cls[key]
        raise CatalogError(
            code="E101",
            message=f"Unknown command option type: {raw!r}",
            hint="Use a Discord option type code (1-11) or its name, e.g. 'string'"
        )

    @property
    def is_subcommand(self) -> bool:
        return self in (OptionType.SUBCOMMAND, OptionType.SUBCOMMAND_GROUP)


@dataclass
class CommandOption:
    """One typed option of a discovered command."""
    name: str
    type: OptionType
    required: bool = False
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandOption":
        return cls(
            name=str(data.get("name", "")),
            type=OptionType.parse(data.get("type", OptionType.STRING)),
            required=data.get("required") is True,
            description=data.get("description") or "",
        )


@dataclass
class CommandDefinition:
    """A command definition as supplied by the discovery collaborator."""
    name: str
    description: str = ""
    options: List[CommandOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandDefinition":
        """Build a definition from a discovery payload.

        Accepts the shape returned by Discord's application commands
        endpoint: ``{"name", "description", "options": [{"name", "type",
        "required"}]}``.
        """
        return cls(
            name=(data.get("name") or "").strip(),
            description=data.get("description") or "",
            options=[CommandOption.from_dict(opt) for opt in data.get("options") or []],
        )

    @property
    def parameter_options(self) -> List[CommandOption]:
        """Options that carry a value (subcommands and groups excluded)."""
        return [opt for opt in self.options if not opt.type.is_subcommand]


# Exact option name -> Slot
NAME_TO_SLOT: Dict[str, Slot] = {
    # users
    "user": Slot.USER,
    "member": Slot.USER,
    "target": Slot.USER,
    "person": Slot.USER,
    "player": Slot.USER,
    "add": Slot.USER,
    "victim": Slot.USER,
    "offender": Slot.USER,
    # reasons
    "reason": Slot.REASON,
    "cause": Slot.REASON,
    "why": Slot.REASON,
    # free text
    "message": Slot.MESSAGE,
    "text": Slot.MESSAGE,
    "content": Slot.MESSAGE,
    "msg": Slot.MESSAGE,
    "note": Slot.MESSAGE,
    # numbers
    "amount": Slot.AMOUNT,
    "number": Slot.AMOUNT,
    "count": Slot.AMOUNT,
    "quantity": Slot.AMOUNT,
    "limit": Slot.AMOUNT,
    # time spans
    "duration": Slot.DURATION,
    "time": Slot.DURATION,
    "timeout": Slot.DURATION,
    "length": Slot.DURATION,
    # roles / channels / names
    "role": Slot.ROLE,
    "rank": Slot.ROLE,
    "channel": Slot.CHANNEL,
    "room": Slot.CHANNEL,
    "name": Slot.NAME,
    "title": Slot.NAME,
    "nickname": Slot.NAME,
}

# Substring keywords, checked in order after the exact lookup fails
SLOT_KEYWORDS: List[Tuple[str, Slot]] = [
    ("reason", Slot.REASON),
    ("cause", Slot.REASON),
    ("why", Slot.REASON),
    ("duration", Slot.DURATION),
    ("length", Slot.DURATION),
    ("seconds", Slot.DURATION),
    ("minutes", Slot.DURATION),
    ("hours", Slot.DURATION),
    ("time", Slot.DURATION),
    ("amount", Slot.AMOUNT),
    ("count", Slot.AMOUNT),
    ("number", Slot.AMOUNT),
    ("quantity", Slot.AMOUNT),
    ("message", Slot.MESSAGE),
    ("text", Slot.MESSAGE),
    ("content", Slot.MESSAGE),
    ("channel", Slot.CHANNEL),
    ("role", Slot.ROLE),
    ("member", Slot.USER),
    ("user", Slot.USER),
    ("target", Slot.USER),
    ("name", Slot.NAME),
    ("title", Slot.NAME),
]

TYPE_TO_SLOT: Dict[OptionType, Slot] = {
    OptionType.USER: Slot.USER,
    OptionType.MENTIONABLE: Slot.USER,
    OptionType.CHANNEL: Slot.CHANNEL,
    OptionType.ROLE: Slot.ROLE,
    OptionType.STRING: Slot.MESSAGE,
    OptionType.INTEGER: Slot.AMOUNT,
    OptionType.NUMBER: Slot.AMOUNT,
    OptionType.BOOLEAN: Slot.MESSAGE,
    OptionType.ATTACHMENT: Slot.MESSAGE,
}

# Entity types whose slot is fixed by the platform, whatever the option is called
_ENTITY_TYPES = (OptionType.USER, OptionType.CHANNEL, OptionType.ROLE, OptionType.MENTIONABLE)


def slot_for_option(option: CommandOption) -> Slot:
    """Map a raw option onto its canonical Slot.

    Platform entity types (user, channel, role, mentionable) decide the slot
    on their own. Other options resolve by exact name lookup, then name
    keyword (substring), then option type. The mapping is total.
    """
    if option.type in _ENTITY_TYPES:
        return TYPE_TO_SLOT[option.type]

    lower_name = option.name.lower().strip()

    slot = NAME_TO_SLOT.get(lower_name)
    if slot is not None:
        return slot

    for keyword, keyword_slot in SLOT_KEYWORDS:
        if keyword in lower_name:
            return keyword_slot

    return TYPE_TO_SLOT.get(option.type, Slot.MESSAGE)


def parse_slot(value: str) -> Optional[Slot]:
    """Return the Slot named by value, or None if it is not canonical."""
    try:
        return Slot(value)
    except ValueError:
        return None
