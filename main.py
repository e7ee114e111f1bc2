#!/usr/bin/env python3
"""Main entry point for the Discord <-> IRC relay."""

import os
import sys
import asyncio
from dotenv import load_dotenv

from bridge import ConfigurationError, RelayBot, load_configs


async def main():
    """Main function."""
    # Load environment variables
    load_dotenv()

    config_file = os.getenv('CONFIG_FILE', 'config.json')

    print("="*60)
    print("Discord <-> IRC relay")
    print("="*60)
    print(f"Config: {config_file}")

    try:
        configs = load_configs(config_file)
        bots = [RelayBot(config) for config in configs]
    except ConfigurationError as e:
        print(f"✗ Configuration error: {e}")
        sys.exit(1)

    print(f"Starting {len(bots)} relay(s)...\n")
    await asyncio.gather(*(bot.run() for bot in bots))


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested...")
        sys.exit(0)
