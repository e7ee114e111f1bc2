import asyncio
from types import SimpleNamespace

import discord

from bridge.discord_client import DiscordConnection, DiscordDirectory, translate_message
from bridge.models import ChatChannel, ChatMention


def text_channel(channel_id, name):
    return SimpleNamespace(id=channel_id, name=name, type=discord.ChannelType.text)


def member(member_id, name, status='online', activity=None):
    return SimpleNamespace(
        id=member_id,
        name=name,
        status=status,
        activity=SimpleNamespace(name=activity) if activity else None
    )


class FakeClient:
    def __init__(self, guilds=(), channels=(), user=None):
        self.guilds = list(guilds)
        self.channels = list(channels)
        self.user = user

    def get_all_channels(self):
        return iter(self.channels)

    def get_channel(self, channel_id):
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None


def test_translate_message():
    message = SimpleNamespace(
        author=SimpleNamespace(id=1, name='alice'),
        channel=SimpleNamespace(id=100, name='general'),
        content='hi <@2>',
        mentions=[SimpleNamespace(id=2, name='bob')],
        attachments=[SimpleNamespace(url='https://cdn.example/a.png')]
    )
    event = translate_message(message)
    assert event.author_id == '1'
    assert event.author_name == 'alice'
    assert event.channel_id == '100'
    assert event.channel_name == '#general'
    assert event.mentions == [ChatMention('2', 'bob')]
    assert event.attachments == ['https://cdn.example/a.png']


def test_translate_direct_message_has_no_channel_name():
    message = SimpleNamespace(
        author=SimpleNamespace(id=1, name='alice'),
        channel=SimpleNamespace(id=5),
        content='hi',
        mentions=[],
        attachments=[]
    )
    assert translate_message(message).channel_name is None


def test_directory_users_deduplicated_across_guilds():
    alice = member(1, 'alice', 'online', 'Tetris')
    guilds = [
        SimpleNamespace(members=[alice, member(2, 'bob', 'idle')]),
        SimpleNamespace(members=[alice]),
    ]
    directory = DiscordDirectory(FakeClient(guilds=guilds))
    users = directory.users()
    assert [user.username for user in users] == ['alice', 'bob']
    assert users[0].activity == 'Tetris'
    assert users[1].status == 'idle'
    assert directory.lookup_user_by_name('bob').user_id == '2'
    assert directory.lookup_user_by_name('zed') is None


def test_directory_channels():
    voice = SimpleNamespace(id=300, name='general', type=discord.ChannelType.voice)
    directory = DiscordDirectory(FakeClient(channels=[voice, text_channel(100, 'general')]))
    assert directory.lookup_channel_by_name('general') == ChatChannel('100', 'general')
    assert directory.lookup_channel_by_name('random') is None
    assert directory.lookup_channel_by_id('100') == ChatChannel('100', 'general')
    assert directory.lookup_channel_by_id('7') is None
    assert directory.lookup_channel_by_id('abc') is None


def test_own_user_id():
    assert DiscordDirectory(FakeClient()).own_user_id is None
    assert DiscordDirectory(FakeClient(user=SimpleNamespace(id=999))).own_user_id == '999'


class RecordingChannel:
    def __init__(self, channel_id, name):
        self.id = channel_id
        self.name = name
        self.type = discord.ChannelType.text
        self.sent = []

    async def send(self, text, **kwargs):
        self.sent.append((text, kwargs))


def test_post_blocks_mass_mentions():
    channel = RecordingChannel(100, 'general')
    connection = DiscordConnection('token', lambda event: None)
    connection.client = FakeClient(channels=[channel])

    async def scenario():
        connection.post('100', '**dave:** @everyone look')
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert len(channel.sent) == 1
    text, kwargs = channel.sent[0]
    assert text == '**dave:** @everyone look'
    allowed = kwargs['allowed_mentions']
    assert allowed.everyone is False
    assert allowed.roles is False
    assert allowed.users is True


def test_post_to_unknown_channel_dropped(capsys):
    connection = DiscordConnection('token', lambda event: None)
    connection.client = FakeClient()
    connection.post('100', 'hi')
    assert 'not found' in capsys.readouterr().out
