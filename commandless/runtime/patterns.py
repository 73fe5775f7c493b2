"""
Pattern generation: turns one discovered command definition into a
catalog entry with natural-language patterns, a bot-agnostic output
template and a confidence bias.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

from ..errors import CatalogError
from .slots import CommandDefinition, CommandOption, Slot, parse_slot, slot_for_option
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3
BASE_CONFIDENCE = 0.7

# Optional slots important enough to appear in the primary pattern
PRIMARY_OPTIONAL_SLOTS = frozenset({Slot.REASON, Slot.MESSAGE, Slot.DURATION})

# Slots that read as well-named parameters
CLEAN_SLOTS = frozenset({
    Slot.USER, Slot.REASON, Slot.CHANNEL, Slot.ROLE, Slot.MESSAGE, Slot.DURATION,
})

REASON_PREPOSITIONS = ("for", "because", "with")

PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


@dataclass
class CatalogEntry:
    """One matchable command of a bot."""
    command_name: str
    primary_pattern: str
    output_template: str
    description: str = ""
    alternative_patterns: List[str] = field(default_factory=list)
    required_slots: FrozenSet[Slot] = frozenset()
    optional_slots: FrozenSet[Slot] = frozenset()
    confidence_bias: float = BASE_CONFIDENCE

    @property
    def all_slots(self) -> FrozenSet[Slot]:
        return self.required_slots | self.optional_slots

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command_name": self.command_name,
            "description": self.description,
            "primary_pattern": self.primary_pattern,
            "alternative_patterns": list(self.alternative_patterns),
            "output_template": self.output_template,
            "required_slots": sorted(s.value for s in self.required_slots),
            "optional_slots": sorted(s.value for s in self.optional_slots),
            "confidence_bias": self.confidence_bias,
        }


class PatternGenerator:
    """Generate catalog entries from command definitions.

    Example:
        >>> gen = PatternGenerator()
        >>> entry = gen.generate(CommandDefinition.from_dict({
        ...     "name": "warn",
        ...     "description": "Warn a member of the server",
        ...     "options": [
        ...         {"name": "user", "type": 6, "required": True},
        ...         {"name": "reason", "type": 3},
        ...     ],
        ... }))
        >>> entry.primary_pattern
        'warn {user} {reason}'
        >>> entry.output_template
        '/warn user:{user} reason:{reason}'
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY

    def generate(self, definition: CommandDefinition) -> CatalogEntry:
        """
        Build the catalog entry for one command definition.

        Args:
            definition: Discovered command definition (must have a name)

        Returns:
            CatalogEntry for the command

        Raises:
            CatalogError: If the generated template references a slot the
                entry does not declare
        """
        options = definition.parameter_options
        required = [opt for opt in options if opt.required]
        optional = [opt for opt in options if not opt.required]

        required_slots = frozenset(slot_for_option(opt) for opt in required)
        optional_slots = frozenset(slot_for_option(opt) for opt in optional) - required_slots

        entry = CatalogEntry(
            command_name=definition.name,
            description=definition.description,
            primary_pattern=self._primary_pattern(definition.name, required, optional),
            alternative_patterns=self._alternative_patterns(definition.name, required, options),
            output_template=self._output_template(definition.name, options),
            required_slots=required_slots,
            optional_slots=optional_slots,
            confidence_bias=self._confidence_bias(definition),
        )
        self._check_template(entry)

        logger.debug(f"Generated patterns for /{entry.command_name}: {entry.primary_pattern}")
        return entry

    def _primary_pattern(
        self,
        name: str,
        required: List[CommandOption],
        optional: List[CommandOption]
    ) -> str:
        parts = [name]
        parts.extend(slot_for_option(opt).placeholder for opt in required)
        for opt in optional:
            slot = slot_for_option(opt)
            if slot in PRIMARY_OPTIONAL_SLOTS:
                parts.append(slot.placeholder)
        return " ".join(parts)

    def _alternative_patterns(
        self,
        name: str,
        required: List[CommandOption],
        options: List[CommandOption]
    ) -> List[str]:
        alternatives = []

        for action in self.vocabulary.alternatives_for(name):
            parts = [action] + [slot_for_option(opt).placeholder for opt in required]
            alternatives.append(" ".join(parts))

        reason_option = next(
            (opt for opt in options if slot_for_option(opt) is Slot.REASON), None
        )
        if reason_option is not None:
            prefix = [name] + [
                slot_for_option(opt).placeholder
                for opt in required
                if opt is not reason_option
            ]
            for prep in REASON_PREPOSITIONS:
                alternatives.append(" ".join(prefix + [prep, Slot.REASON.placeholder]))

        return alternatives[:MAX_ALTERNATIVES]

    def _output_template(self, name: str, options: List[CommandOption]) -> str:
        parts = [f"/{name}"]
        for opt in options:
            parts.append(f"{opt.name}:{slot_for_option(opt).placeholder}")
        return " ".join(parts)

    def _confidence_bias(self, definition: CommandDefinition) -> float:
        confidence = BASE_CONFIDENCE
        options = definition.parameter_options

        if definition.description and len(definition.description) > 10:
            confidence += 0.1

        if any(slot_for_option(opt) in CLEAN_SLOTS for opt in options):
            confidence += 0.1

        if len(options) > 5:
            confidence -= 0.1

        if definition.name.lower() in self.vocabulary.moderation_commands:
            confidence += 0.1

        return round(min(max(confidence, 0.1), 1.0), 2)

    def _check_template(self, entry: CatalogEntry) -> None:
        for raw in PLACEHOLDER_RE.findall(entry.output_template):
            slot = parse_slot(raw)
            if slot is None or slot not in entry.all_slots:
                raise CatalogError(
                    code="E102",
                    message=f"Template for /{entry.command_name} references undeclared slot '{raw}'",
                    hint="Every template placeholder must be a required or optional slot of the entry"
                )
