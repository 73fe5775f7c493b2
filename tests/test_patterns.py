"""
Tests for pattern generation.
"""

import pytest

from commandless.errors import CatalogError
from commandless.runtime.patterns import (
    PLACEHOLDER_RE,
    PatternGenerator,
)
from commandless.runtime.slots import CommandDefinition, Slot, parse_slot


@pytest.fixture
def generator():
    return PatternGenerator()


def _definition(name, options=(), description=""):
    return CommandDefinition.from_dict({
        "name": name,
        "description": description,
        "options": list(options),
    })


class TestPrimaryPattern:
    """Primary pattern and output template"""

    def test_warn(self, generator):
        entry = generator.generate(_definition("warn", [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3},
        ], "Warn a member of the server"))

        assert entry.primary_pattern == "warn {user} {reason}"
        assert entry.output_template == "/warn user:{user} reason:{reason}"
        assert entry.required_slots == frozenset({Slot.USER})
        assert entry.optional_slots == frozenset({Slot.REASON})

    def test_one_placeholder_per_required_option(self, generator):
        entry = generator.generate(_definition("move", [
            {"name": "member", "type": 6, "required": True},
            {"name": "destination", "type": 7, "required": True},
        ]))
        assert entry.primary_pattern == "move {user} {channel}"

    def test_optional_slots_outside_primary_set_are_omitted(self, generator):
        entry = generator.generate(_definition("purge", [
            {"name": "amount", "type": 4, "required": True},
            {"name": "channel", "type": 7},
        ]))
        assert entry.primary_pattern == "purge {amount}"
        assert entry.output_template == "/purge amount:{amount} channel:{channel}"

    def test_no_options(self, generator):
        entry = generator.generate(_definition("ping"))
        assert entry.primary_pattern == "ping"
        assert entry.output_template == "/ping"
        assert entry.all_slots == frozenset()

    def test_subcommands_are_skipped(self, generator):
        entry = generator.generate(_definition("config", [
            {"name": "show", "type": 1},
            {"name": "reset", "type": 2},
        ]))
        assert entry.output_template == "/config"

    def test_template_placeholders_are_canonical(self, generator):
        entry = generator.generate(_definition("tag", [
            {"name": "target", "type": 9, "required": True},
            {"name": "label", "type": 3, "required": True},
            {"name": "enabled", "type": 5},
            {"name": "file", "type": 11},
        ]))
        for raw in PLACEHOLDER_RE.findall(entry.output_template):
            slot = parse_slot(raw)
            assert slot is not None
            assert slot in entry.all_slots

    def test_required_slot_wins_over_optional_duplicate(self, generator):
        entry = generator.generate(_definition("swap", [
            {"name": "user", "type": 6, "required": True},
            {"name": "other", "type": 6},
        ]))
        assert entry.required_slots == frozenset({Slot.USER})
        assert entry.optional_slots == frozenset()


class TestAlternativePatterns:
    """Synonym and preposition variants"""

    def test_action_synonyms_then_prepositions(self, generator):
        entry = generator.generate(_definition("warn", [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3},
        ]))
        assert entry.alternative_patterns == [
            "caution {user}",
            "alert {user}",
            "warn {user} for {reason}",
        ]

    def test_at_most_three(self, generator):
        entry = generator.generate(_definition("ban", [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3},
        ]))
        assert len(entry.alternative_patterns) == 3

    def test_prepositions_without_synonyms(self, generator):
        entry = generator.generate(_definition("report", [
            {"name": "user", "type": 6, "required": True},
            {"name": "reason", "type": 3, "required": True},
        ]))
        assert entry.alternative_patterns == [
            "report {user} for {reason}",
            "report {user} because {reason}",
            "report {user} with {reason}",
        ]

    def test_unknown_command_without_reason_has_none(self, generator):
        entry = generator.generate(_definition("ping"))
        assert entry.alternative_patterns == []


class TestConfidenceBias:
    """Confidence bias heuristics"""

    def test_moderation_command_with_description(self, generator):
        entry = generator.generate(_definition("warn", [
            {"name": "user", "type": 6, "required": True},
        ], "Warn a member of the server"))
        assert entry.confidence_bias == 1.0

    def test_plain_command(self, generator):
        entry = generator.generate(_definition("ping", description="Check the bot latency"))
        assert entry.confidence_bias == 0.8

    def test_many_options_lower_bias(self, generator):
        options = [{"name": f"n{i}", "type": 4} for i in range(6)]
        entry = generator.generate(_definition("stats", options))
        assert entry.confidence_bias == 0.6

    def test_bias_in_range(self, generator):
        entry = generator.generate(_definition("x"))
        assert 0.1 <= entry.confidence_bias <= 1.0


def test_to_dict(generator):
    entry = generator.generate(_definition("say", [
        {"name": "message", "type": 3, "required": True},
    ], "Make the bot say something"))
    data = entry.to_dict()
    assert data["command_name"] == "say"
    assert data["required_slots"] == ["message"]
    assert data["output_template"] == "/say message:{message}"


def test_undeclared_template_slot_raises(generator):
    definition = _definition("warn", [{"name": "user", "type": 6, "required": True}])
    entry = generator.generate(definition)
    entry.output_template = "/warn user:{user} reason:{reason}"
    with pytest.raises(CatalogError) as exc_info:
        generator._check_template(entry)
    assert exc_info.value.code == "E102"
