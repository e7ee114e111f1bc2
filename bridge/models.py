"""Data models for relayed events, outbound commands and directory entries."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


# Directory records

@dataclass
class ChatUser:
    """Chat user representation."""
    user_id: str
    username: str
    status: str = 'offline'  # online, idle, offline, dnd
    activity: Optional[str] = None


@dataclass
class ChatChannel:
    """Chat channel representation (name without the leading '#')."""
    channel_id: str
    name: str


class ChatDirectory:
    """Read-only view of the live Chat user and channel lists.

    Implementations query the underlying client every time; the relay never
    keeps the results between events.
    """

    @property
    def own_user_id(self) -> Optional[str]:
        raise NotImplementedError

    def users(self) -> List[ChatUser]:
        raise NotImplementedError

    def lookup_user_by_name(self, name: str) -> Optional[ChatUser]:
        for user in self.users():
            if user.username == name:
                return user
        return None

    def lookup_channel_by_name(self, name: str) -> Optional[ChatChannel]:
        raise NotImplementedError

    def lookup_channel_by_id(self, channel_id: str) -> Optional[ChatChannel]:
        raise NotImplementedError


# Inbound events

@dataclass
class ChatMention:
    user_id: str
    username: str


@dataclass
class ChatReady:
    username: str = ''


@dataclass
class ChatMessage:
    """Message posted in a Chat channel."""
    author_id: str
    author_name: str
    channel_id: Optional[str]
    channel_name: Optional[str]  # canonical form, e.g. '#general'
    content: str
    mentions: List[ChatMention] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)


@dataclass
class ChatDisconnect:
    pass


@dataclass
class IrcRegistered:
    message: str = ''


@dataclass
class IrcMessage:
    author: str
    channel: str
    text: str


@dataclass
class IrcNotice:
    author: str
    channel: str
    text: str


@dataclass
class IrcAction:
    author: str
    channel: str
    text: str


@dataclass
class IrcJoin:
    channel: str
    nick: str


@dataclass
class IrcPart:
    channel: str
    nick: str
    reason: str = ''


@dataclass
class IrcQuit:
    nick: str
    reason: str = ''
    channels: List[str] = field(default_factory=list)


@dataclass
class IrcUserList:
    """Complete NAMES reply for one channel, mode prefixes included."""
    channel: str
    users: List[str] = field(default_factory=list)


@dataclass
class IrcInvite:
    channel: str
    inviter: str


@dataclass
class ErrorEvent:
    source: str  # 'IRC' or 'Discord'
    details: List[str] = field(default_factory=list)


# Outbound commands

@dataclass(frozen=True)
class IrcSay:
    channel: str
    text: str


@dataclass(frozen=True)
class IrcRaw:
    parts: Tuple[str, ...]


@dataclass(frozen=True)
class IrcJoinChannel:
    channel: str
    key: Optional[str] = None


@dataclass(frozen=True)
class ChatPost:
    channel_id: str
    text: str


@dataclass(frozen=True)
class ChatLogin:
    pass
