import asyncio

import pytest

from bridge.bot import RelayBot
from bridge.config import RelayConfig
from bridge.models import ChatChannel, ChatDisconnect, ChatMessage, IrcMessage

from conftest import FakeDirectory


class FakeIrc:
    def __init__(self):
        self.calls = []

    def say(self, channel, text):
        self.calls.append(('say', channel, text))

    def send(self, *parts):
        self.calls.append(('send',) + parts)

    def join(self, channel, key=None):
        self.calls.append(('join', channel, key))

    def connect(self):
        pass

    def disconnect(self):
        pass


class FakeDiscord:
    def __init__(self, directory):
        self.directory = directory
        self.posts = []
        self.logins = 0

    def post(self, channel_id, text):
        self.posts.append((channel_id, text))

    def login(self):
        self.logins += 1


@pytest.fixture
def bot(options):
    options['ircNickColor'] = False
    directory = FakeDirectory(channels=[ChatChannel('100', 'general')])
    return RelayBot(RelayConfig.from_dict(options), irc=FakeIrc(), discord=FakeDiscord(directory))


def test_discord_message_reaches_irc(bot):
    bot.dispatch(ChatMessage('1', 'alice', '100', '#general', 'hello', attachments=['https://x/a.png']))
    assert bot.irc.calls == [
        ('say', '#test', 'alice: hello'),
        ('say', '#test', 'alice: https://x/a.png'),
    ]


def test_irc_message_reaches_discord(bot):
    bot.dispatch(IrcMessage('dave', '#test', 'hi'))
    assert bot.discord.posts == [('100', '**dave:** hi')]


def test_failed_command_does_not_stop_the_rest(bot, capsys):
    def broken(channel, text):
        raise ConnectionError('socket closed')

    bot.irc.say = broken
    bot.dispatch(ChatMessage('1', 'alice', '100', '#general', 'hello', attachments=['https://x/a.png']))
    assert capsys.readouterr().out.count('✗ Failed to execute') == 2


def test_threadsafe_dispatch_without_loop_drops(bot, capsys):
    bot.dispatch_threadsafe(IrcMessage('dave', '#test', 'hi'))
    assert bot.discord.posts == []
    assert 'Event loop not running' in capsys.readouterr().out


def test_threadsafe_dispatch_runs_on_loop(bot):
    async def scenario():
        bot.loop = asyncio.get_running_loop()
        bot.dispatch_threadsafe(IrcMessage('dave', '#test', 'hi'))
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert bot.discord.posts == [('100', '**dave:** hi')]


def test_disconnect_triggers_login(bot):
    bot.dispatch(ChatDisconnect())
    assert bot.discord.logins == 1
