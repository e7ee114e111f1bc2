from bridge.formatting import (
    IRC_RESET, NICK_COLORS, display_name, mention_chat_users, nick_color,
    normalize_line_breaks, parse_chat_text, replace_mentions, wrap_color
)
from bridge.models import ChatChannel, ChatMention, ChatUser

from conftest import FakeDirectory


def test_palette_has_twelve_colors():
    assert len(NICK_COLORS) == 12


def test_nick_color_index():
    # ord('a') = 97, len = 5 -> 102 % 12 = 6
    assert nick_color('alice') == NICK_COLORS[6] == 'magenta'
    assert nick_color('alice') == nick_color('alice')


def test_wrap_color():
    assert wrap_color('light_blue', 'bob') == '\x0312bob' + IRC_RESET


def test_display_name_plain_when_disabled():
    assert display_name('alice', colored=False) == 'alice'
    assert display_name('alice') == '\x0306alice\x0f'


def test_replace_mentions_both_forms():
    text = replace_mentions('hi <@1> and <@!2>', [ChatMention('1', 'alice'), ChatMention('2', 'bob')])
    assert text == 'hi @alice and @bob'


def test_replace_mentions_is_literal():
    assert replace_mentions('<@12>', [ChatMention('1', 'alice')]) == '<@12>'


def test_normalize_line_breaks():
    assert normalize_line_breaks('a\nb\r\nc\rd') == 'a b c d'


def test_parse_chat_text_resolves_channels():
    directory = FakeDirectory(channels=[ChatChannel('100', 'general')])
    text = parse_chat_text('see <#100>\nand <#555>', [], directory)
    assert text == 'see #general and <#555>'


def test_mention_chat_users():
    directory = FakeDirectory(users=[ChatUser('1', 'alice')])
    assert mention_chat_users('@alice: hi @nobody', directory) == '<@1>: hi @nobody'
