"""Event translation between Discord and IRC."""

from typing import Callable, Dict, List, Optional

from .channels import ChannelMapping
from .commands import NOT_SUPPORTED, CommandHandler
from .config import RelayConfig
from .formatting import display_name, mention_chat_users, parse_chat_text
from .models import (
    ChatDirectory, ChatDisconnect, ChatLogin, ChatMessage, ChatPost, ChatReady,
    ErrorEvent, IrcAction, IrcInvite, IrcJoin, IrcJoinChannel, IrcMessage,
    IrcNotice, IrcPart, IrcQuit, IrcRaw, IrcRegistered, IrcSay, IrcUserList
)


class Relay:
    """
    Translates inbound events from either side into outbound commands.

    Every handler is synchronous and returns a list of commands; nothing here
    talks to the network, so the whole relay can be driven from tests.
    """

    def __init__(self, config: RelayConfig, directory: ChatDirectory):
        """
        Initialize relay.

        Args:
            config: Validated relay configuration
            directory: Live view of Chat users and channels

        Raises:
            ConfigurationError: The channel mapping is malformed
        """
        self.config = config
        self.directory = directory
        self.mapping = ChannelMapping(config.channel_mapping)

        self.chat_commands: Dict[str, Callable] = {}
        self.irc_commands: Dict[str, Callable] = {}
        CommandHandler.register_all(self)

        self.handlers: Dict[type, Callable] = {
            ChatReady: self.on_chat_ready,
            ChatMessage: self.on_chat_message,
            ChatDisconnect: self.on_chat_disconnect,
            IrcRegistered: self.on_irc_registered,
            IrcMessage: self.on_irc_message,
            IrcNotice: self.on_irc_notice,
            IrcAction: self.on_irc_action,
            IrcJoin: self.on_irc_join,
            IrcPart: self.on_irc_part,
            IrcQuit: self.on_irc_quit,
            IrcUserList: self.on_irc_user_list,
            IrcInvite: self.on_irc_invite,
            ErrorEvent: self.on_error,
        }

    def register_chat_command(self, command: str, handler: Callable):
        """Register a command typed in Chat and executed against IRC."""
        self.chat_commands[command] = handler

    def register_irc_command(self, command: str, handler: Callable):
        """Register a command typed in IRC and answered from the Chat directory."""
        self.irc_commands[command] = handler

    def handle(self, event) -> List:
        """Translate one inbound event into zero or more outbound commands."""
        handler = self.handlers.get(type(event))
        if handler is None:
            print(f"  Unhandled event: {event!r}")
            return []
        return handler(event)

    def is_command(self, text: str) -> bool:
        return bool(text) and text[0] in self.config.command_characters

    # Chat -> IRC

    def on_chat_ready(self, event: ChatReady) -> List:
        print(f"✓ Connected to Discord as {event.username}")
        return []

    def on_chat_disconnect(self, event: ChatDisconnect) -> List:
        print("✗ Disconnected from Discord, logging in again")
        return [ChatLogin()]

    def on_chat_message(self, event: ChatMessage) -> List:
        if event.author_id == self.directory.own_user_id:
            return []

        irc_channel = self.mapping.irc_channel_for(event.channel_name)
        print(f"  Channel Mapping : {event.channel_name} and {irc_channel}")
        if not irc_channel:
            return []

        text = parse_chat_text(event.content, event.mentions, self.directory)

        if self.is_command(text):
            return self._run_chat_command(text, irc_channel, event.channel_id)

        name = display_name(event.author_name, self.config.irc_nick_color)
        commands = []
        if text:
            commands.append(IrcSay(irc_channel, f"{name}: {text}"))
        for url in event.attachments:
            commands.append(IrcSay(irc_channel, f"{name}: {url}"))
        return commands

    def _run_chat_command(self, text: str, irc_channel: str, chat_channel_id: Optional[str]) -> List:
        parts = text.split(' ')
        trigger, command = parts[0][0], parts[0][1:]
        args = parts[1] if len(parts) > 1 else ''
        print(f"  Command from Discord: {parts[0]} {args}".rstrip())

        handler = self.chat_commands.get(command)
        if handler is None:
            return [ChatPost(chat_channel_id, NOT_SUPPORTED)] if chat_channel_id else []
        return handler(self, irc_channel, chat_channel_id, trigger, args)

    # IRC -> Chat

    def send_to_chat(self, author: str, channel: str, text: str) -> List:
        """Route text from an IRC channel to its mapped Chat channel."""
        chat_channel_name = self.mapping.chat_channel_for(channel)
        if not chat_channel_name:
            print(f"  No Discord channel mapped for {channel}, dropping")
            return []

        name = chat_channel_name[1:] if chat_channel_name.startswith('#') else chat_channel_name
        chat_channel = self.directory.lookup_channel_by_name(name)
        if not chat_channel:
            print(f"✗ Tried to send a message to a channel the bot isn't in : {chat_channel_name}")
            return []

        if self.is_command(text):
            return self._run_irc_command(text)

        with_mentions = mention_chat_users(text, self.directory)
        return [ChatPost(chat_channel.channel_id, f"**{author}:** {with_mentions}")]

    def _run_irc_command(self, text: str) -> List:
        command = text.strip()[1:]
        print(f"  Command from IRC: {text.strip()}")

        handler = self.irc_commands.get(command)
        response = handler(self) if handler else NOT_SUPPORTED
        return [IrcSay(self.mapping.primary_irc_channel, response)]

    def on_irc_message(self, event: IrcMessage) -> List:
        return self.send_to_chat(event.author, event.channel, event.text)

    def on_irc_notice(self, event: IrcNotice) -> List:
        return self.send_to_chat(event.author, event.channel, f"*{event.text}*")

    def on_irc_action(self, event: IrcAction) -> List:
        return self.send_to_chat(event.author, event.channel, f"_{event.text}_")

    def on_irc_join(self, event: IrcJoin) -> List:
        return self.send_to_chat(self.config.nickname, event.channel, f"SIGN ON IRC : {event.nick}")

    def on_irc_part(self, event: IrcPart) -> List:
        return self.send_to_chat(self.config.nickname, event.channel, f"SIGN OFF IRC : {event.nick}")

    def on_irc_quit(self, event: IrcQuit) -> List:
        commands = []
        for channel in event.channels:
            commands.extend(self.send_to_chat(
                self.config.nickname, channel, f"QUIT SERVER : {event.nick} / {event.reason}"
            ))
        return commands

    def on_irc_user_list(self, event: IrcUserList) -> List:
        users = ', '.join(user.replace('@', '*', 1) for user in event.users)
        text = f"IRC IN {event.channel} : {users} - TOTAL : {len(event.users)}"
        return self.send_to_chat(self.config.nickname, event.channel, text)

    def on_irc_invite(self, event: IrcInvite) -> List:
        print(f"← Received invite : {event.channel} < {event.inviter}")
        if not self.mapping.chat_channel_for(event.channel):
            print(f"  Channel not found in config, not joining : {event.channel}")
            return []

        print(f"→ Joining channel : {event.channel}")
        return [IrcJoinChannel(event.channel, self.mapping.key_for(event.channel))]

    def on_irc_registered(self, event: IrcRegistered) -> List:
        print(f"✓ Registered event: {event.message}")
        commands = [IrcRaw(tuple(parts)) for parts in self.config.auto_send_commands]
        for channel in self.mapping.irc_channels:
            commands.append(IrcJoinChannel(channel, self.mapping.key_for(channel)))
        return commands

    def on_error(self, event: ErrorEvent) -> List:
        print(f"✗ Received error event from {event.source}")
        for detail in event.details:
            print(f"  -> {detail}")
        return []
