"""
modrelay
========

Discord bot core that links an end user's DMs to a staff thread channel,
relays staff replies to the user and lets staff block users from threads.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. MODRELAY_HOME environment variable, if set.
    2. If running frozen (PyInstaller, Nuitka), the executable's directory.
    3. Otherwise the project root two levels above this package.
    """
    if env_home := os.getenv("MODRELAY_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from modrelay.database.database import database
from modrelay.threads.block_store import BlockStore
from modrelay.threads.relay_engine import RelayEngine
from modrelay.threads.thread_resolver import ThreadResolver
from modrelay.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the intents needed to read thread messages and resolve members."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.dm_messages = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, block_store: BlockStore, relay_engine: RelayEngine) -> None:
    """Register the command cogs with the bot."""
    from modrelay.bot.cogs import block_cmds, reply_cmds

    block_cmds.setup(discord_bot_instance, block_store)
    reply_cmds.setup(discord_bot_instance, relay_engine)

    logger.info("All cogs loaded successfully.")


def create_bot() -> tuple[discord.Bot, BlockStore]:
    """Instantiate the bot and the thread components it serves."""
    bot = discord.Bot(intents=build_intents())
    resolver = ThreadResolver(database)
    block_store = BlockStore(database, bot, resolver=resolver)
    relay_engine = RelayEngine(database, resolver=resolver)
    load_cogs(bot, block_store, relay_engine)
    return bot, block_store


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot, block_store: BlockStore) -> None:
    """Close the bot, let pending block DMs finish, then close the database."""
    if not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    await block_store.wait_for_notifications()

    try:
        await database.shutdown()
    except Exception as exc:
        logger.exception("Error during database shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database and the bot, returning an exit code."""
    token = load_environment()

    logger.info("Initializing database...")
    if not await database.initialize():
        logger.critical("Failed to initialize database at %s", database.db_path)
        return 1

    try:
        bot, block_store = create_bot()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await database.shutdown()
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, block_store)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting modrelay…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
