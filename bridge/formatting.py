"""Text transforms between Chat markup and IRC lines."""

import re
from typing import Iterable

from .models import ChatDirectory, ChatMention

# mIRC colour codes
IRC_COLORS = {
    'white': '\x0300',
    'black': '\x0301',
    'dark_blue': '\x0302',
    'dark_green': '\x0303',
    'light_red': '\x0304',
    'dark_red': '\x0305',
    'magenta': '\x0306',
    'orange': '\x0307',
    'yellow': '\x0308',
    'light_green': '\x0309',
    'cyan': '\x0310',
    'light_cyan': '\x0311',
    'light_blue': '\x0312',
    'light_magenta': '\x0313',
    'gray': '\x0314',
    'light_gray': '\x0315',
}
IRC_RESET = '\x0f'

NICK_COLORS = [
    'light_blue', 'dark_blue', 'light_red', 'dark_red', 'light_green',
    'dark_green', 'magenta', 'light_magenta', 'orange', 'yellow', 'cyan', 'light_cyan'
]

_LINE_BREAK_PATTERN = re.compile(r'\r\n|\n|\r')
_CHANNEL_REF_PATTERN = re.compile(r'<#(\d+)>')
_IRC_MENTION_PATTERN = re.compile(r'@[^\s]+\b')


def wrap_color(color: str, text: str) -> str:
    """Wrap text in an IRC colour code followed by a reset."""
    return f"{IRC_COLORS[color]}{text}{IRC_RESET}"


def nick_color(username: str) -> str:
    """Deterministic palette entry for a username."""
    index = (ord(username[0]) + len(username)) % len(NICK_COLORS)
    return NICK_COLORS[index]


def display_name(username: str, colored: bool = True) -> str:
    if not colored or not username:
        return username
    return wrap_color(nick_color(username), username)


def replace_mentions(content: str, mentions: Iterable[ChatMention]) -> str:
    """Rewrite <@id> (and the <@!id> nickname form) to @username."""
    for mention in mentions:
        for reference in (f"<@{mention.user_id}>", f"<@!{mention.user_id}>"):
            content = content.replace(reference, f"@{mention.username}")
    return content


def replace_channel_refs(content: str, directory: ChatDirectory) -> str:
    """Rewrite <#id> channel references to #name; unknown ids stay as-is."""
    def resolve(match):
        channel = directory.lookup_channel_by_id(match.group(1))
        return f"#{channel.name}" if channel else match.group(0)

    return _CHANNEL_REF_PATTERN.sub(resolve, content)


def normalize_line_breaks(content: str) -> str:
    return _LINE_BREAK_PATTERN.sub(' ', content)


def parse_chat_text(content: str, mentions: Iterable[ChatMention], directory: ChatDirectory) -> str:
    """Turn Chat message content into a single IRC-safe line."""
    text = replace_mentions(content, mentions)
    text = replace_channel_refs(text, directory)
    return normalize_line_breaks(text)


def mention_chat_users(text: str, directory: ChatDirectory) -> str:
    """Rewrite @username tokens from IRC into Chat mentions where the user exists."""
    def resolve(match):
        user = directory.lookup_user_by_name(match.group(0)[1:])
        return f"<@{user.user_id}>" if user else match.group(0)

    return _IRC_MENTION_PATTERN.sub(resolve, text)
