#!/usr/bin/env python3
"""
c0rd - Entry Point
==================

Audit trail mirror: watches one Discord server and posts who did what
into a dedicated set of channels on another.

Features:
- Moderator attribution from the audit log (deletes, kicks, moves, mutes)
- Invite tracking on joins
- Self-healing logging channel layout
- Graceful error handling
"""

import asyncio
import sys

import discord
from dotenv import load_dotenv

from src.core.config import ConfigValidationError, get_config, validate_and_log_config
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler


async def main() -> None:
    """
    Main entry point for c0rd.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates required settings
    3. Initializes bot instance with proper intents
    4. Establishes connection to Discord API

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start
    """
    load_dotenv()

    try:
        config = get_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        sys.exit(1)

    validate_and_log_config()

    from src.bot import C0rdBot

    bot = C0rdBot(config)
    try:
        async with bot:
            await bot.start(config.discord_token)
    except (discord.LoginFailure, discord.PrivilegedIntentsRequired) as e:
        ErrorHandler.handle(e, location="main.main", critical=True)
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
