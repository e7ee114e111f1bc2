"""IRC side of the relay, using miniirc."""

import threading
from typing import Any, Callable, Dict, List, Optional, Set

import miniirc

from .models import (
    ErrorEvent, IrcAction, IrcInvite, IrcJoin, IrcMessage, IrcNotice, IrcPart,
    IrcQuit, IrcRegistered, IrcUserList
)

NICK_PREFIXES = '@+%~&'

# ERROR plus the numerics that stop us registering or joining
ERROR_COMMANDS = ('ERROR', '431', '432', '433', '465', '471', '473', '474', '475')


class IrcConnection:
    """
    Thin wrapper around a miniirc client.

    Incoming IRC traffic is turned into relay events and handed to
    ``on_event``; outgoing calls go straight to the socket.
    """

    def __init__(
        self,
        server: str,
        port: int,
        nick: str,
        on_event: Callable[[Any], None],
        options: Optional[dict] = None
    ):
        """
        Initialize IRC connection.

        Args:
            server: IRC server address
            port: IRC server port
            nick: Bot nickname (also used as ident and realname)
            on_event: Called with each relay event, from miniirc's threads
            options: Extra keyword arguments for miniirc.IRC
        """
        self.server = server
        self.port = port
        self.nick = nick
        self.on_event = on_event
        self.options = options or {}

        self.irc: Optional[miniirc.IRC] = None
        self._lock = threading.Lock()
        self._pending_names: Dict[str, List[str]] = {}
        self._members: Dict[str, Set[str]] = {}

    def connect(self):
        """Create the miniirc client, register handlers and connect."""
        print(f"Connecting to {self.server}:{self.port} as {self.nick}...")

        kwargs = {'ident': self.nick, 'realname': self.nick}
        kwargs.update(self.options)
        self.irc = miniirc.IRC(
            self.server,
            self.port,
            self.nick,
            auto_connect=False,
            **kwargs
        )
        self._register_handlers(self.irc)

        try:
            self.irc.connect()
        except Exception as e:
            print(f"✗ Connection failed: {e}")
            raise

    def _register_handlers(self, irc: miniirc.IRC):
        irc.Handler('001', colon=False)(self.on_welcome)
        irc.Handler('PRIVMSG', colon=False)(self.on_privmsg)
        irc.Handler('NOTICE', colon=False)(self.on_notice)
        irc.Handler('JOIN', colon=False)(self.on_join)
        irc.Handler('PART', colon=False)(self.on_part)
        irc.Handler('KICK', colon=False)(self.on_kick)
        irc.Handler('QUIT', colon=False)(self.on_quit)
        irc.Handler('NICK', colon=False)(self.on_nick)
        irc.Handler('INVITE', colon=False)(self.on_invite)
        irc.Handler('353', colon=False)(self.on_names)  # RPL_NAMREPLY
        irc.Handler('366', colon=False)(self.on_names_end)  # RPL_ENDOFNAMES
        irc.Handler(*ERROR_COMMANDS, colon=False)(self.on_error)

    # Outgoing

    def say(self, channel: str, text: str):
        print(f"→ [{channel}] {text}")
        self._require_client().msg(channel, text)

    def send(self, *parts: str):
        print(f"→ {' '.join(parts)}")
        self._require_client().send(*parts)

    def join(self, channel: str, key: Optional[str] = None):
        print(f"→ JOIN {channel}")
        if key:
            self._require_client().send('JOIN', channel, key)
        else:
            self._require_client().send('JOIN', channel)

    def disconnect(self):
        if self.irc:
            self.irc.disconnect()

    def _require_client(self) -> miniirc.IRC:
        if self.irc is None:
            raise RuntimeError('IRC client not initialized')
        return self.irc

    # Incoming

    def on_welcome(self, irc, hostmask, args):
        print(f"✓ Connected to server as {args[0]}")
        self.on_event(IrcRegistered(args[-1]))

    def on_privmsg(self, irc, hostmask, args):
        channel, text = args[0], args[-1]
        nick = hostmask[0]
        print(f"← [{channel}] <{nick}> {text}")

        if text.startswith('\x01'):
            body = text.strip('\x01')
            if body.startswith('ACTION '):
                self.on_event(IrcAction(nick, channel, body[len('ACTION '):]))
            # other CTCP requests are not relayed
            return

        self.on_event(IrcMessage(nick, channel, text))

    def on_notice(self, irc, hostmask, args):
        channel, text = args[0], args[-1]
        print(f"← [{channel}] -{hostmask[0]}- {text}")
        self.on_event(IrcNotice(hostmask[0], channel, text))

    def on_join(self, irc, hostmask, args):
        channel, nick = args[0], hostmask[0]
        print(f"  {nick} joined {channel}")
        with self._lock:
            self._members.setdefault(channel.lower(), set()).add(nick.lower())
        self.on_event(IrcJoin(channel, nick))

    def on_part(self, irc, hostmask, args):
        channel, nick = args[0], hostmask[0]
        reason = args[1] if len(args) > 1 else ''
        print(f"  {nick} left {channel}")
        self._forget(irc, channel, nick)
        self.on_event(IrcPart(channel, nick, reason))

    def on_kick(self, irc, hostmask, args):
        channel, nick = args[0], args[1]
        print(f"  {nick} was kicked from {channel} by {hostmask[0]}")
        self._forget(irc, channel, nick)

    def on_quit(self, irc, hostmask, args):
        nick = hostmask[0]
        reason = args[0] if args else ''
        print(f"  {nick} quit ({reason})")

        with self._lock:
            channels = [
                channel for channel, members in self._members.items()
                if nick.lower() in members
            ]
            for channel in channels:
                self._members[channel].discard(nick.lower())

        self.on_event(IrcQuit(nick, reason, channels))

    def on_nick(self, irc, hostmask, args):
        old_nick, new_nick = hostmask[0], args[0]
        print(f"  {old_nick} is now known as {new_nick}")
        with self._lock:
            for members in self._members.values():
                if old_nick.lower() in members:
                    members.discard(old_nick.lower())
                    members.add(new_nick.lower())

    def on_invite(self, irc, hostmask, args):
        # Format: :inviter INVITE nick :#channel
        self.on_event(IrcInvite(args[-1], hostmask[0]))

    def on_names(self, irc, hostmask, args):
        # Format: :server 353 nick = #channel :nick1 @nick2 +nick3
        channel, names = args[2], args[3].split()
        with self._lock:
            self._pending_names.setdefault(channel.lower(), []).extend(names)
            members = self._members.setdefault(channel.lower(), set())
            members.update(name.lstrip(NICK_PREFIXES).lower() for name in names)

    def on_names_end(self, irc, hostmask, args):
        channel = args[1]
        with self._lock:
            names = self._pending_names.pop(channel.lower(), [])
        print(f"  NAMES for {channel}: {len(names)} users")
        self.on_event(IrcUserList(channel, names))

    def on_error(self, irc, hostmask, args):
        print(f"✗ IRC ERROR: {args}")
        self.on_event(ErrorEvent('IRC', list(args)))

    def _forget(self, irc, channel: str, nick: str):
        with self._lock:
            if nick.lower() == irc.current_nick.lower():
                self._members.pop(channel.lower(), None)
            else:
                self._members.get(channel.lower(), set()).discard(nick.lower())
