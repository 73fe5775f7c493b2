"""
Tests for slot parameter extraction.
"""

import pytest

from commandless.runtime.slot_extractors import (
    MentionData,
    ParameterExtractor,
    run_rules,
    REASON_RULES,
)
from commandless.runtime.slots import Slot


@pytest.fixture
def extractor():
    return ParameterExtractor()


class TestUser:
    """User slot from structured mentions"""

    def test_first_mention(self, extractor):
        params = extractor.extract([Slot.USER], "warn <@42> now", MentionData(user_ids=["42"]))
        assert params[Slot.USER] == "42"

    def test_bot_is_never_the_target(self, extractor):
        mentions = MentionData(user_ids=["999", "42"], bot_user_id="999")
        assert extractor.extract_user("<@999> ban <@42>", mentions) == "42"

    def test_leading_mention_is_skipped_with_several(self, extractor):
        mentions = MentionData(user_ids=["1", "2"])
        assert extractor.extract_user("<@1> ban <@2> please", mentions) == "2"

    def test_single_leading_mention_is_kept(self, extractor):
        assert extractor.extract_user("<@1> is spamming", MentionData(user_ids=["1"])) == "1"

    def test_no_mentions(self, extractor):
        params = extractor.extract([Slot.USER], "warn bob", None)
        assert params[Slot.USER] == ""


class TestReason:
    """Reason rules"""

    @pytest.mark.parametrize("text,expected", [
        ("warn user123 for spamming", "spamming"),
        ("ban them because they keep trolling", "they keep trolling"),
        ("kick <@1> due to raid activity", "raid activity"),
        ("warn reason: posting links", "posting links"),
        ("warn <@5> reason: spamming for hours", "spamming for hours"),
        ("please remove spammer they are being toxic", "toxic"),
        ("mute him, he keeps posting memes", "posting memes"),
    ])
    def test_rules(self, extractor, text, expected):
        params = extractor.extract([Slot.REASON], text)
        assert params[Slot.REASON] == expected

    def test_behaviour_keyword_fallback(self, extractor):
        assert extractor.extract_reason("ban him he is so toxic lol") == "toxic"

    def test_too_short_reason_is_rejected(self, extractor):
        assert extractor.extract_reason("ban him for x") == ""

    def test_reasonable_is_not_a_reason_marker(self):
        assert run_rules(REASON_RULES[:1], "that seems reasonable enough") == ""


class TestMessage:
    """Message rules"""

    def test_double_quotes(self, extractor):
        params = extractor.extract([Slot.MESSAGE], 'say "meeting moved to 3pm" now')
        assert params[Slot.MESSAGE] == "meeting moved to 3pm"

    def test_after_verb(self, extractor):
        params = extractor.extract([Slot.MESSAGE], "announce the server is back up")
        assert params[Slot.MESSAGE] == "the server is back up"

    def test_note_colon(self, extractor):
        params = extractor.extract([Slot.MESSAGE], "add note: helpful member")
        assert params[Slot.MESSAGE] == "helpful member"


class TestAmount:
    """Amount rules"""

    @pytest.mark.parametrize("text,expected", [
        ("purge 10 messages", "10"),
        ("clear about 15 please", "15"),
        ("delete 3", "3"),
        ("delete five messages", "5"),
        ("clean up twenty of them", "20"),
    ])
    def test_rules(self, extractor, text, expected):
        assert extractor.extract([Slot.AMOUNT], text)[Slot.AMOUNT] == expected

    def test_no_number(self, extractor):
        assert extractor.extract([Slot.AMOUNT], "purge everything")[Slot.AMOUNT] == ""


class TestDuration:
    """Duration rules"""

    @pytest.mark.parametrize("text,expected", [
        ("mute <@1> for 10 minutes", "10m"),
        ("timeout him 2h", "2h"),
        ("mute for 30 secs", "30s"),
        ("ban for 7 days", "7d"),
    ])
    def test_rules(self, extractor, text, expected):
        assert extractor.extract([Slot.DURATION], text)[Slot.DURATION] == expected


class TestRoleChannelName:
    """Role, channel and name slots"""

    def test_role_mention_first(self, extractor):
        mentions = MentionData(role_ids=["555"])
        assert extractor.extract([Slot.ROLE], "give them the moderator role", mentions)[Slot.ROLE] == "555"

    def test_role_phrase(self, extractor):
        assert extractor.extract([Slot.ROLE], "give them the moderator role")[Slot.ROLE] == "moderator"

    def test_common_role_word(self, extractor):
        assert extractor.extract([Slot.ROLE], "make bob a vip")[Slot.ROLE] == "vip"

    def test_channel_from_mentions_only(self, extractor):
        assert extractor.extract([Slot.CHANNEL], "lock general")[Slot.CHANNEL] == ""
        mentions = MentionData(channel_ids=["321"])
        assert extractor.extract([Slot.CHANNEL], "lock <#321>", mentions)[Slot.CHANNEL] == "321"

    def test_name(self, extractor):
        assert extractor.extract([Slot.NAME], "create a channel named dev-chat")[Slot.NAME] == "dev-chat"
        assert extractor.extract([Slot.NAME], "rename to 'Night Owls'")[Slot.NAME] == "Night Owls"


def test_extract_returns_every_requested_slot(extractor):
    params = extractor.extract([Slot.USER, Slot.REASON, Slot.AMOUNT], "hello there")
    assert set(params) == {Slot.USER, Slot.REASON, Slot.AMOUNT}
    assert all(value == "" for value in params.values())
