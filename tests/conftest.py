import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bridge.config import RelayConfig  # noqa: E402
from bridge.models import ChatChannel, ChatDirectory, ChatUser  # noqa: E402
from bridge.relay import Relay  # noqa: E402

BOT_ID = '999'


class FakeDirectory(ChatDirectory):
    """In-memory directory standing in for the Discord caches."""

    def __init__(self, users=None, channels=None, own_id=BOT_ID):
        self._users = list(users or [])
        self._channels = list(channels or [])
        self._own_id = own_id

    @property
    def own_user_id(self):
        return self._own_id

    def users(self):
        return list(self._users)

    def lookup_channel_by_name(self, name):
        for channel in self._channels:
            if channel.name == name:
                return channel
        return None

    def lookup_channel_by_id(self, channel_id):
        for channel in self._channels:
            if channel.channel_id == channel_id:
                return channel
        return None


@pytest.fixture
def options():
    return {
        'server': 'irc.example.org',
        'port': 6667,
        'nickname': 'relaybot',
        'discordToken': 'token',
        'commandCharacters': ['!'],
        'channelMapping': {
            '#general': '#Test',
            '#private': '#secret hunter2',
        },
    }


@pytest.fixture
def directory():
    return FakeDirectory(
        users=[
            ChatUser('1', 'alice', 'online', 'Tetris'),
            ChatUser('2', 'bob', 'idle'),
            ChatUser('3', 'carol', 'offline'),
            ChatUser(BOT_ID, 'relaybot', 'online'),
        ],
        channels=[
            ChatChannel('100', 'general'),
            ChatChannel('200', 'private'),
        ]
    )


@pytest.fixture
def make_relay(options, directory):
    def factory(**overrides):
        merged = dict(options)
        merged.update(overrides)
        return Relay(RelayConfig.from_dict(merged), directory)
    return factory


@pytest.fixture
def relay(make_relay):
    return make_relay()
