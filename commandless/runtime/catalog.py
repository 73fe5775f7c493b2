"""
Command catalog store for multi-bot matching.

Holds the per-bot list of catalog entries built by the pattern generator.
A catalog is rebuilt wholesale on discovery/sync events and is read-only
while messages are being matched.

Copyright (c) 2025 Graziano Labs Corp.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .patterns import CatalogEntry, PatternGenerator
from .slots import CommandDefinition

logger = logging.getLogger(__name__)

DefinitionLike = Union[CommandDefinition, Dict[str, Any]]


def load_definitions(path: str) -> List[Dict[str, Any]]:
    """
    Load raw command definitions from a JSON file.

    The file holds either a list of definitions or an object with a
    ``commands`` list (the shape of a discovery dump).

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If the file does not contain a list of definitions
    """
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Definitions file not found: {path}")

    data = json.loads(path_obj.read_text())
    if isinstance(data, dict):
        data = data.get("commands")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of command definitions in {path}")
    return data


class CatalogStore:
    """
    Registry of command catalogs, one per bot.

    Each catalog:
    - Is keyed by bot identifier (bot_id)
    - Preserves discovery order (used for deterministic tie-breaks)
    - Is replaced as a whole by rebuild()
    """

    def __init__(self, generator: Optional[PatternGenerator] = None):
        """Initialize empty store."""
        self.generator = generator or PatternGenerator()
        self._catalogs: Dict[str, List[CatalogEntry]] = {}

    def rebuild(self, bot_id: str, definitions: Iterable[DefinitionLike]) -> List[CatalogEntry]:
        """
        Rebuild the catalog of a bot from its discovered command definitions.

        Definitions without a name are skipped with a warning.

        Args:
            bot_id: Bot identifier
            definitions: CommandDefinition objects or raw discovery dicts

        Returns:
            The new list of catalog entries

        Raises:
            CatalogError: If a definition has an unknown option type or
                produces an inconsistent template
        """
        entries: List[CatalogEntry] = []
        seen = set()

        for raw in definitions:
            definition = raw if isinstance(raw, CommandDefinition) else CommandDefinition.from_dict(raw)
            if not definition.name:
                logger.warning(f"Skipping command definition without a name for bot {bot_id}")
                continue
            if definition.name.lower() in seen:
                logger.warning(f"Skipping duplicate command /{definition.name} for bot {bot_id}")
                continue
            seen.add(definition.name.lower())
            entries.append(self.generator.generate(definition))

        self._catalogs[bot_id] = entries
        logger.info(f"Rebuilt catalog for bot {bot_id}: {len(entries)} command(s)")
        return list(entries)

    def get(self, bot_id: str) -> List[CatalogEntry]:
        """Return the catalog of a bot (empty when the bot has none)."""
        return list(self._catalogs.get(bot_id, []))

    def find(self, bot_id: str, command_name: str) -> Optional[CatalogEntry]:
        """Find an entry by command name (case-insensitive, leading '/' ignored)."""
        wanted = command_name.lstrip("/").lower()
        for entry in self._catalogs.get(bot_id, []):
            if entry.command_name.lower() == wanted:
                return entry
        return None

    def remove(self, bot_id: str) -> None:
        self._catalogs.pop(bot_id, None)

    def bot_ids(self) -> List[str]:
        return list(self._catalogs.keys())

    def __contains__(self, bot_id: str) -> bool:
        return bot_id in self._catalogs
