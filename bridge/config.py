"""Relay configuration loading and validation."""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

REQUIRED_FIELDS = ['server', 'port', 'nickname', 'channelMapping', 'discordToken']
IRC_CHANNEL_PREFIXES = '#&+!'

# Keeps string literals intact so '//' inside a URL survives.
_COMMENT_PATTERN = re.compile(
    r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/',
    re.DOTALL
)


class ConfigurationError(Exception):
    """Raised when the relay configuration is missing or malformed."""
    pass


def strip_comments(text: str) -> str:
    """Remove // and /* */ comments from a JSON document."""
    return _COMMENT_PATTERN.sub(lambda m: m.group(1) or '', text)


def validate_channel_mapping(mapping: Any):
    """Check the shape of a channelMapping value, raising on the first problem."""
    if not isinstance(mapping, dict) or not mapping:
        raise ConfigurationError('Invalid channel mapping given')

    for chat_channel, irc_value in mapping.items():
        if not isinstance(chat_channel, str) or not chat_channel.strip():
            raise ConfigurationError('Invalid channel mapping given')

        tokens = irc_value.split() if isinstance(irc_value, str) else []
        if not 1 <= len(tokens) <= 2:
            raise ConfigurationError(f"Invalid IRC channel for {chat_channel}: {irc_value!r}")

        name = tokens[0]
        if name[0] not in IRC_CHANNEL_PREFIXES or ',' in name:
            raise ConfigurationError(f"Invalid IRC channel for {chat_channel}: {irc_value!r}")


def _validate_optional_fields(options: Dict[str, Any]):
    commands = options.get('autoSendCommands') or []
    if not isinstance(commands, (list, tuple)):
        raise ConfigurationError('Invalid configuration field autoSendCommands: expected a list')
    for command in commands:
        if not isinstance(command, (list, tuple)) or not command:
            raise ConfigurationError(
                f"Invalid configuration field autoSendCommands: {command!r} is not a list of command parts"
            )

    for name in ('ircOptions', 'discordOptions'):
        value = options.get(name)
        if value is not None and not isinstance(value, dict):
            raise ConfigurationError(f"Invalid configuration field {name}: expected an object")


@dataclass(frozen=True)
class RelayConfig:
    """Validated, immutable settings for one relay instance."""
    server: str
    port: int
    nickname: str
    channel_mapping: Dict[str, str]
    discord_token: str
    command_characters: Tuple[str, ...] = ()
    irc_nick_color: bool = True
    auto_send_commands: Tuple[Tuple[str, ...], ...] = ()
    irc_options: Dict[str, Any] = field(default_factory=dict)
    discord_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> 'RelayConfig':
        """
        Build a config from a parsed configuration document.

        Args:
            options: Mapping using the document's camelCase keys

        Raises:
            ConfigurationError: A required field is missing or the
                channel mapping is malformed
        """
        if not isinstance(options, dict):
            raise ConfigurationError('Configuration must be an object')

        for name in REQUIRED_FIELDS:
            if not options.get(name):
                raise ConfigurationError(f"Missing configuration field {name}")

        validate_channel_mapping(options['channelMapping'])
        _validate_optional_fields(options)

        try:
            port = int(options['port'])
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid port: {options['port']!r}")

        return cls(
            server=options['server'],
            port=port,
            nickname=options['nickname'],
            channel_mapping=dict(options['channelMapping']),
            discord_token=options['discordToken'],
            command_characters=tuple(options.get('commandCharacters') or ()),
            # Only an explicit false disables colouring
            irc_nick_color=options.get('ircNickColor') is not False,
            auto_send_commands=tuple(
                tuple(str(part) for part in command)
                for command in options.get('autoSendCommands') or ()
            ),
            irc_options=dict(options.get('ircOptions') or {}),
            discord_options=dict(options.get('discordOptions') or {})
        )


def parse_config(text: str) -> List[Dict[str, Any]]:
    """Parse a configuration document into a list of raw config objects."""
    try:
        data = json.loads(strip_comments(text))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid configuration document: {e}")

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list) and data:
        return data
    raise ConfigurationError('Configuration must be an object or a non-empty list of objects')


def apply_env_overrides(options: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Fill secrets the document leaves out from the environment."""
    if not isinstance(options, dict):
        return options
    environ = os.environ if environ is None else environ
    options = dict(options)
    if not options.get('discordToken') and environ.get('DISCORD_TOKEN'):
        options['discordToken'] = environ['DISCORD_TOKEN']
    return options


def load_configs(path: str, environ: Optional[Dict[str, str]] = None) -> List[RelayConfig]:
    """Read, strip, parse and validate a configuration file."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    raw_configs = parse_config(config_path.read_text(encoding='utf-8'))
    return [
        RelayConfig.from_dict(apply_env_overrides(options, environ))
        for options in raw_configs
    ]
