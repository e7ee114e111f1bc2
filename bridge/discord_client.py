"""Discord side of the relay, using discord.py."""

import asyncio
import traceback
from typing import Any, Callable, Dict, List, Optional

import discord

from .models import (
    ChatChannel, ChatDirectory, ChatDisconnect, ChatMention, ChatMessage,
    ChatReady, ChatUser, ErrorEvent
)

# IRC users may ping people, but not the whole guild or a role
RELAYED_MENTIONS = discord.AllowedMentions(everyone=False, roles=False)


def translate_message(message) -> ChatMessage:
    """Build a ChatMessage from a discord.Message."""
    channel_name = getattr(message.channel, 'name', None)
    return ChatMessage(
        author_id=str(message.author.id),
        author_name=message.author.name,
        channel_id=str(message.channel.id),
        channel_name=f"#{channel_name}" if channel_name else None,
        content=message.content,
        mentions=[ChatMention(str(user.id), user.name) for user in message.mentions],
        attachments=[attachment.url for attachment in message.attachments]
    )


class DiscordDirectory(ChatDirectory):
    """Directory backed by the discord.py client caches, read on every call."""

    def __init__(self, client: discord.Client):
        self.client = client

    @property
    def own_user_id(self) -> Optional[str]:
        return str(self.client.user.id) if self.client.user else None

    def users(self) -> List[ChatUser]:
        # Presence and activity live on guild members, not on plain users
        seen: Dict[int, ChatUser] = {}
        for guild in self.client.guilds:
            for member in guild.members:
                if member.id in seen:
                    continue
                activity = getattr(member.activity, 'name', None)
                seen[member.id] = ChatUser(
                    user_id=str(member.id),
                    username=member.name,
                    status=str(member.status),
                    activity=activity
                )
        return list(seen.values())

    def lookup_channel_by_name(self, name: str) -> Optional[ChatChannel]:
        for channel in self.client.get_all_channels():
            if channel.type == discord.ChannelType.text and channel.name == name:
                return ChatChannel(str(channel.id), channel.name)
        return None

    def lookup_channel_by_id(self, channel_id: str) -> Optional[ChatChannel]:
        try:
            channel = self.client.get_channel(int(channel_id))
        except ValueError:
            return None
        if channel is None or not getattr(channel, 'name', None):
            return None
        return ChatChannel(str(channel.id), channel.name)


class DiscordConnection:
    """Owns the discord.py client and forwards its events to the relay."""

    def __init__(self, token: str, on_event: Callable[[Any], None], options: Optional[dict] = None):
        """
        Initialize Discord connection.

        Args:
            token: Bot token
            on_event: Called with each relay event, on the client's event loop
            options: Extra keyword arguments for discord.Client
        """
        self.token = token
        self.on_event = on_event

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.presences = True

        self.client = discord.Client(intents=intents, **(options or {}))
        self.directory = DiscordDirectory(self.client)
        self._register_handlers()

    def _register_handlers(self):
        @self.client.event
        async def on_ready():
            self.on_event(ChatReady(str(self.client.user)))

        @self.client.event
        async def on_message(message):
            self.on_event(translate_message(message))

        @self.client.event
        async def on_disconnect():
            self.on_event(ChatDisconnect())

        @self.client.event
        async def on_error(event_method, *args, **kwargs):
            self.on_event(ErrorEvent('Discord', [event_method, traceback.format_exc()]))

    async def start(self):
        """Log in and run until the client is closed."""
        print("Logging in to Discord...")
        await self.client.start(self.token, reconnect=True)

    def login(self):
        """Start a new session unless discord.py is already resuming one."""
        if not self.client.is_closed():
            print("  Discord session still open, waiting for it to resume")
            return
        print("→ Logging in to Discord again")
        self.client.clear()
        asyncio.ensure_future(self.start())

    def post(self, channel_id: str, text: str):
        channel = self.client.get_channel(int(channel_id))
        if channel is None:
            print(f"✗ Discord channel {channel_id} not found, dropping message")
            return

        print(f"→ [#{channel.name}] {text}")
        task = asyncio.ensure_future(channel.send(text, allowed_mentions=RELAYED_MENTIONS))
        task.add_done_callback(self._report_send_failure)

    @staticmethod
    def _report_send_failure(task: asyncio.Future):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            print(f"✗ Failed to send message to Discord: {error}")

    async def close(self):
        await self.client.close()
