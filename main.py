import asyncio
import logging

from gamification.bot import main as run
from gamification.database import start_db
from gamification.database.db_manager import DBManager
from gamification.utils.env import load_env
from gamification.utils.logs import setup_logging

if __name__ == '__main__':
    setup_logging(logging.INFO)
    load_env()

    with DBManager() as db:
        start_db.run(db)

    asyncio.run(run())
