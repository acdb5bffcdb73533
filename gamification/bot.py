import asyncio
import logging
import pathlib

import discord
from discord.ext import commands

from gamification.database.db_manager import DBManager
from gamification.utils.env import load_env, require_env

logger = logging.getLogger(__name__)


def get_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.members = True
    return intents


class GamificationBot(commands.Bot):
    def __init__(self):
        super().__init__(command_prefix='/', intents=get_intents())

    async def setup_hook(self):
        cogs_path = pathlib.Path(__file__).parent / 'cogs'
        for file in cogs_path.glob('*_cog.py'):
            module = f'gamification.cogs.{file.stem}'
            try:
                await self.load_extension(module)
                logger.info(f'Loaded {module}')
            except Exception:
                logger.error(f'Failed to load {module}', exc_info=True)

    async def on_ready(self):
        guild_id = require_env('GUILD_ID')
        guild = discord.Object(id=int(guild_id))
        self.tree.copy_global_to(guild=guild)
        await self.tree.sync(guild=guild)
        logger.info(f'Bot ready! Synced commands to guild {guild_id}')


async def main():
    load_env()
    token = require_env('DISCORD_TOKEN')

    # One Postgres pool for the whole process
    DBManager.init_pool()

    bot = GamificationBot()
    try:
        async with bot:
            await bot.start(token)
    except Exception:
        logger.error('Bot failed due to an exception', exc_info=True)
    finally:
        DBManager.close_pool()


if __name__ == '__main__':
    asyncio.run(main())
