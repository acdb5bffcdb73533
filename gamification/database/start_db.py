import logging

from gamification.database.db_manager import DBManager
from gamification.database.schema import init_schema

logger = logging.getLogger(__name__)


def run(db: DBManager) -> None:
    '''Create the schema and report which tables exist.'''
    init_schema(db)
    tables = db.fetchall(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = 'public' ORDER BY table_name"
    )
    logger.info(f'Current tables in DB: {[t["table_name"] for t in tables]}')


if __name__ == '__main__':
    with DBManager() as _db:
        run(_db)
