"""Discord <-> IRC relay."""

from .bot import RelayBot
from .config import ConfigurationError, RelayConfig, load_configs
from .relay import Relay

__all__ = ['RelayBot', 'Relay', 'RelayConfig', 'ConfigurationError', 'load_configs']
