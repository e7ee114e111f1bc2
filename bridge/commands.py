"""Command handlers for the relay."""

from typing import TYPE_CHECKING, List

from .models import ChatPost, IrcRaw

if TYPE_CHECKING:
    from .relay import Relay

NOT_SUPPORTED = 'Command not supported.'

# Presence glyphs for the IRC-side users listing
STATUS_GLYPHS = {
    'online': '^',
    'idle': '-',
    'offline': 'v',
}


def _presence(status: str) -> str:
    """Collapse Chat presence states into online/idle/offline."""
    status = str(status).lower()
    if status in ('online', 'dnd'):
        return 'online'
    if status == 'idle':
        return 'idle'
    if status in ('offline', 'invisible'):
        return 'offline'
    return status


class CommandHandler:
    """Handler for relay commands.

    Chat-side commands run against IRC (mode changes, NAMES); IRC-side
    commands answer from the Chat directory.
    """

    @staticmethod
    def register_all(relay: 'Relay'):
        """Register all commands with the relay."""
        relay.register_chat_command('op', CommandHandler.cmd_op)
        relay.register_chat_command('deop', CommandHandler.cmd_deop)
        relay.register_chat_command('users', CommandHandler.cmd_names)
        relay.register_irc_command('games', CommandHandler.cmd_games)
        relay.register_irc_command('users', CommandHandler.cmd_users)

    @staticmethod
    def cmd_op(relay: 'Relay', irc_channel: str, chat_channel_id: str, trigger: str, args: str) -> List:
        """Issue MODE +o on the mapped IRC channel."""
        return CommandHandler._mode(irc_channel, chat_channel_id, '+o', f"{trigger}op", args)

    @staticmethod
    def cmd_deop(relay: 'Relay', irc_channel: str, chat_channel_id: str, trigger: str, args: str) -> List:
        """Issue MODE -o on the mapped IRC channel."""
        return CommandHandler._mode(irc_channel, chat_channel_id, '-o', f"{trigger}deop", args)

    @staticmethod
    def _mode(irc_channel: str, chat_channel_id: str, mode: str, usage: str, nick: str) -> List:
        if not nick:
            return [ChatPost(chat_channel_id, f"Usage: {usage} <nick>")]
        return [IrcRaw(('MODE', irc_channel, mode, nick))]

    @staticmethod
    def cmd_names(relay: 'Relay', irc_channel: str, chat_channel_id: str, trigger: str, args: str) -> List:
        """Ask the IRC server for the channel's user list; the reply arrives as a NAMES event."""
        return [IrcRaw(('NAMES', irc_channel))]

    @staticmethod
    def cmd_games(relay: 'Relay') -> str:
        """Users reporting an activity, as name[game]."""
        playing = [
            f"{user.username}[{user.activity}]"
            for user in relay.directory.users()
            if user.activity
        ]
        return f"PLAY LIST : {', '.join(playing)}".rstrip()

    @staticmethod
    def cmd_users(relay: 'Relay') -> str:
        """Users partitioned by presence, with counts and a total."""
        users = relay.directory.users()
        counts = {'online': 0, 'offline': 0, 'idle': 0}
        listed = []

        for user in users:
            presence = _presence(user.status)
            if presence in counts:
                counts[presence] += 1
            if presence in ('online', 'idle'):
                listed.append(f"{STATUS_GLYPHS[presence]}{user.username}")

        summary = (
            f"online {counts['online']}, offline {counts['offline']}, "
            f"idle {counts['idle']} = Total {len(users)}"
        )
        if not listed:
            return f"DISCORD IN : {summary}"
        return f"DISCORD IN : {', '.join(listed)} : {summary}"
