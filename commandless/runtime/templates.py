"""
Command renderer: substitutes extracted slot values into an output
template such as ``/warn user:{user} reason:{reason}``.

Supports:
- {slot}: Canonical slot placeholder, replaced by the extracted value
- Defaults for unresolved reason/message/amount/duration/user slots
- Unresolved role/channel/name options are dropped from the command

The renderer has no side effects; executing the command string is the
caller's job.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import re
from typing import Dict, Mapping, Optional, Union

from ..errors import TemplateError
from .slots import Slot, parse_slot

logger = logging.getLogger(__name__)

SLOT_DEFAULTS: Dict[Slot, str] = {
    Slot.REASON: "No reason provided",
    Slot.MESSAGE: "No message provided",
    Slot.AMOUNT: "1",
    Slot.DURATION: "5m",
    Slot.USER: "target user",
}

# An "option:{slot}" token, or a bare "{slot}"
_TOKEN_RE = re.compile(r"(?:(?<=\s)|^)(?:[^\s{}]+:)?\{([^{}]*)\}")

ParamMap = Mapping[Union[Slot, str], str]


class CommandRenderer:
    """Render output templates with slot values."""

    def __init__(self, defaults: Optional[Dict[Slot, str]] = None):
        self.defaults = dict(SLOT_DEFAULTS if defaults is None else defaults)

    def render(self, template: str, params: ParamMap) -> str:
        """
        Render a command template.

        Args:
            template: Output template with {slot} placeholders
            params: Slot values (keys may be Slot members or slot names)

        Returns:
            Command string with no placeholders left

        Raises:
            TemplateError: If the template contains a non-canonical placeholder
        """
        values = self._normalize(params)

        def _replace(match: re.Match) -> str:
            token = match.group(0)
            slot = parse_slot(match.group(1))
            if slot is None:
                raise TemplateError(
                    code="E001",
                    message=f"Unknown placeholder '{{{match.group(1)}}}' in template: {template}",
                    hint=f"Placeholders must be one of: {', '.join(s.value for s in Slot)}"
                )
            value = values.get(slot) or self.defaults.get(slot)
            if not value:
                return ""
            return token[: match.start(1) - match.start(0) - 1] + value

        rendered = _TOKEN_RE.sub(_replace, template)
        return " ".join(rendered.split())

    def _normalize(self, params: ParamMap) -> Dict[Slot, str]:
        values: Dict[Slot, str] = {}
        for key, value in params.items():
            slot = key if isinstance(key, Slot) else parse_slot(str(key))
            if slot is None:
                logger.debug(f"Ignoring non-slot parameter '{key}'")
                continue
            if value is not None and str(value).strip():
                values[slot] = str(value).strip()
        return values
