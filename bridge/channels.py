"""Chat channel <-> IRC channel routing tables."""

from typing import Dict, List, Optional

from .config import validate_channel_mapping


class ChannelMapping:
    """
    Forward (Chat -> IRC) and inverse (IRC -> Chat) channel tables.

    IRC channel names are lower-cased and stripped of their join key; keys
    are kept separately for the connection layer. Built once, never mutated.
    """

    def __init__(self, mapping: Dict[str, str]):
        validate_channel_mapping(mapping)

        self._forward: Dict[str, str] = {}
        self._keys: Dict[str, str] = {}
        self._irc_channels: List[str] = []

        for chat_channel, irc_value in mapping.items():
            tokens = irc_value.split(None, 1)
            irc_channel = tokens[0].lower()
            self._forward[chat_channel] = irc_channel
            if len(tokens) > 1:
                self._keys[irc_channel] = tokens[1].strip()
            if irc_channel not in self._irc_channels:
                self._irc_channels.append(irc_channel)

        self._inverse: Dict[str, str] = {}
        for chat_channel, irc_channel in self._forward.items():
            previous = self._inverse.get(irc_channel)
            if previous is not None:
                print(f"⚠ {previous} and {chat_channel} both map to {irc_channel}, "
                      f"relaying {irc_channel} to {chat_channel} only")
            self._inverse[irc_channel] = chat_channel

    def irc_channel_for(self, chat_channel: Optional[str]) -> Optional[str]:
        """Routing IRC channel for a Chat channel, or None if unmapped."""
        if chat_channel is None:
            return None
        return self._forward.get(chat_channel)

    def chat_channel_for(self, irc_channel: Optional[str]) -> Optional[str]:
        """Chat channel for an IRC channel (case-insensitive), or None if unmapped."""
        if irc_channel is None:
            return None
        return self._inverse.get(irc_channel.lower())

    def key_for(self, irc_channel: str) -> Optional[str]:
        return self._keys.get(irc_channel.lower())

    @property
    def irc_channels(self) -> List[str]:
        """Mapped IRC channels in configuration order."""
        return list(self._irc_channels)

    @property
    def primary_irc_channel(self) -> str:
        return self._irc_channels[0]

    def __len__(self):
        return len(self._forward)
