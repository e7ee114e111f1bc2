"""Relay bot: connects both sides and executes the relay's commands."""

import asyncio
from typing import Callable, Dict, List, Optional

from .config import RelayConfig
from .discord_client import DiscordConnection
from .irc_client import IrcConnection
from .models import ChatLogin, ChatPost, IrcJoinChannel, IrcRaw, IrcSay
from .relay import Relay


class RelayBot:
    """Discord <-> IRC relay bot."""

    def __init__(
        self,
        config: RelayConfig,
        irc: Optional[IrcConnection] = None,
        discord: Optional[DiscordConnection] = None
    ):
        """
        Initialize relay bot.

        Args:
            config: Validated relay configuration
            irc: IRC connection (created from config if omitted)
            discord: Discord connection (created from config if omitted)
        """
        self.config = config
        self.loop: Optional[asyncio.AbstractEventLoop] = None

        self.discord = discord or DiscordConnection(
            token=config.discord_token,
            on_event=self.dispatch,
            options=config.discord_options
        )
        self.irc = irc or IrcConnection(
            server=config.server,
            port=config.port,
            nick=config.nickname,
            on_event=self.dispatch_threadsafe,
            options=config.irc_options
        )
        self.relay = Relay(config, self.discord.directory)

        self.executors: Dict[type, Callable] = {
            IrcSay: lambda c: self.irc.say(c.channel, c.text),
            IrcRaw: lambda c: self.irc.send(*c.parts),
            IrcJoinChannel: lambda c: self.irc.join(c.channel, c.key),
            ChatPost: lambda c: self.discord.post(c.channel_id, c.text),
            ChatLogin: lambda c: self.discord.login(),
        }

    def dispatch(self, event):
        """Handle one event on the event loop thread."""
        self.execute(self.relay.handle(event))

    def dispatch_threadsafe(self, event):
        """Hand an event from another thread (miniirc) to the event loop."""
        if self.loop is None:
            print(f"✗ Event loop not running, dropping {type(event).__name__}")
            return
        self.loop.call_soon_threadsafe(self.dispatch, event)

    def execute(self, commands: List):
        for command in commands:
            try:
                self.executors[type(command)](command)
            except Exception as e:
                print(f"✗ Failed to execute {command!r}: {e}")

    async def run(self):
        """Connect both sides and run until Discord closes."""
        self.loop = asyncio.get_running_loop()

        print("Connecting to IRC and Discord")
        print(f"Server : {self.config.server}/{self.config.port}")
        print(f"Channels : {', '.join(self.relay.mapping.irc_channels)}")
        print(f"Nick : {self.config.nickname}")

        self.irc.connect()
        try:
            await self.discord.start()
        finally:
            await self.shutdown()

    async def shutdown(self):
        """Shutdown the bot gracefully."""
        self.irc.disconnect()
        await self.discord.close()
        print("Bot stopped.")
