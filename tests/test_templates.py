"""
Tests for command rendering.

Copyright (c) 2025 Graziano Labs Corp.
"""

import pytest

from commandless.errors import TemplateError
from commandless.runtime.slots import Slot
from commandless.runtime.templates import CommandRenderer


@pytest.fixture
def renderer():
    return CommandRenderer()


class TestSubstitution:
    """Basic slot substitution"""

    def test_all_values(self, renderer):
        result = renderer.render(
            "/warn user:{user} reason:{reason}",
            {Slot.USER: "42", Slot.REASON: "spamming"},
        )
        assert result == "/warn user:42 reason:spamming"

    def test_string_keys(self, renderer):
        assert renderer.render("/purge amount:{amount}", {"amount": "10"}) == "/purge amount:10"

    def test_bare_placeholder(self, renderer):
        assert renderer.render("/say {message}", {Slot.MESSAGE: "hi all"}) == "/say hi all"

    def test_values_are_not_reinterpreted(self, renderer):
        result = renderer.render("/say message:{message}", {Slot.MESSAGE: r"use \1 and {user}"})
        assert result == r"/say message:use \1 and {user}"

    def test_unknown_params_are_ignored(self, renderer):
        assert renderer.render("/ping", {"target": "x"}) == "/ping"


class TestDefaults:
    """Unresolved slots"""

    def test_reason_default(self, renderer):
        result = renderer.render("/warn user:{user} reason:{reason}", {Slot.USER: "42"})
        assert result == "/warn user:42 reason:No reason provided"

    @pytest.mark.parametrize("slot,expected", [
        (Slot.MESSAGE, "No message provided"),
        (Slot.AMOUNT, "1"),
        (Slot.DURATION, "5m"),
        (Slot.USER, "target user"),
    ])
    def test_defaults(self, renderer, slot, expected):
        assert renderer.render(f"/x opt:{{{slot.value}}}", {}) == f"/x opt:{expected}"

    def test_blank_value_uses_default(self, renderer):
        assert renderer.render("/purge amount:{amount}", {Slot.AMOUNT: "  "}) == "/purge amount:1"

    @pytest.mark.parametrize("slot", [Slot.ROLE, Slot.CHANNEL, Slot.NAME])
    def test_token_without_default_is_dropped(self, renderer, slot):
        template = f"/cmd user:{{user}} opt:{{{slot.value}}} reason:{{reason}}"
        result = renderer.render(template, {Slot.USER: "1", Slot.REASON: "spam"})
        assert result == "/cmd user:1 reason:spam"

    def test_no_placeholder_survives(self, renderer):
        template = "/all u:{user} r:{reason} m:{message} a:{amount} d:{duration} ro:{role} c:{channel} n:{name}"
        result = renderer.render(template, {})
        assert "{" not in result and "}" not in result


class TestErrors:
    """Invalid templates"""

    def test_unknown_placeholder(self, renderer):
        with pytest.raises(TemplateError) as exc_info:
            renderer.render("/warn target:{target}", {})
        assert exc_info.value.code == "E001"
        assert "target" in exc_info.value.message

    def test_empty_placeholder(self, renderer):
        with pytest.raises(TemplateError):
            renderer.render("/warn user:{}", {})
