import logging

from gamification.database.db_manager import DBManager

logger = logging.getLogger(__name__)

# Id lists (roles, tasks, rewards, members) are JSONB arrays of integers
TABLES: list[tuple[str, str]] = [
    (
        'organisations',
        '''
        CREATE TABLE IF NOT EXISTS organisations (
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            api_key TEXT UNIQUE NOT NULL,
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        )
        ''',
    ),
    (
        'roles',
        '''
        CREATE TABLE IF NOT EXISTS roles (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            name TEXT NOT NULL
        )
        ''',
    ),
    (
        'players',
        '''
        CREATE TABLE IF NOT EXISTS players (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            nickname TEXT NOT NULL,
            reference TEXT,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            points INTEGER NOT NULL DEFAULT 0,
            coins INTEGER NOT NULL DEFAULT 0,
            level_index INTEGER NOT NULL DEFAULT 0,
            level_label TEXT NOT NULL DEFAULT '',
            role_ids JSONB NOT NULL DEFAULT '[]',
            UNIQUE (organisation_id, reference)
        )
        ''',
    ),
    (
        'player_groups',
        '''
        CREATE TABLE IF NOT EXISTS player_groups (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            name TEXT NOT NULL,
            points INTEGER NOT NULL DEFAULT 0,
            coins INTEGER NOT NULL DEFAULT 0,
            level_index INTEGER NOT NULL DEFAULT 0,
            level_label TEXT NOT NULL DEFAULT '',
            player_ids JSONB NOT NULL DEFAULT '[]'
        )
        ''',
    ),
    (
        'tasks',
        '''
        CREATE TABLE IF NOT EXISTS tasks (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            tradeable BOOLEAN NOT NULL DEFAULT FALSE,
            role_ids JSONB NOT NULL DEFAULT '[]'
        )
        ''',
    ),
    (
        'rules',
        '''
        CREATE TABLE IF NOT EXISTS rules (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            rule_type TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            task_ids JSONB NOT NULL DEFAULT '[]',
            points INTEGER,
            expression TEXT
        )
        ''',
    ),
    (
        'rewards',
        '''
        CREATE TABLE IF NOT EXISTS rewards (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            reward_type TEXT NOT NULL,
            name TEXT NOT NULL DEFAULT '',
            description TEXT NOT NULL DEFAULT '',
            icon_url TEXT,
            amount INTEGER CHECK (amount IS NULL OR amount >= 0),
            level_index INTEGER,
            level_label TEXT
        )
        ''',
    ),
    (
        'goals',
        '''
        CREATE TABLE IF NOT EXISTS goals (
            id SERIAL PRIMARY KEY,
            organisation_id INTEGER NOT NULL REFERENCES organisations(id),
            name TEXT NOT NULL,
            rule_id INTEGER NOT NULL REFERENCES rules(id),
            repeatable BOOLEAN NOT NULL DEFAULT FALSE,
            group_goal BOOLEAN NOT NULL DEFAULT FALSE,
            role_ids JSONB NOT NULL DEFAULT '[]',
            reward_ids JSONB NOT NULL DEFAULT '[]'
        )
        ''',
    ),
    (
        'finished_tasks',
        '''
        CREATE TABLE IF NOT EXISTS finished_tasks (
            id SERIAL PRIMARY KEY,
            task_id INTEGER NOT NULL REFERENCES tasks(id),
            player_id INTEGER NOT NULL REFERENCES players(id) ON DELETE CASCADE,
            finished_at TIMESTAMPTZ NOT NULL
        )
        ''',
    ),
    (
        'finished_goals',
        '''
        CREATE TABLE IF NOT EXISTS finished_goals (
            id SERIAL PRIMARY KEY,
            goal_id INTEGER NOT NULL REFERENCES goals(id),
            player_id INTEGER REFERENCES players(id) ON DELETE CASCADE,
            group_id INTEGER REFERENCES player_groups(id) ON DELETE CASCADE,
            finished_at TIMESTAMPTZ NOT NULL,
            CHECK ((player_id IS NULL) <> (group_id IS NULL))
        )
        ''',
    ),
    (
        'granted_rewards',
        '''
        CREATE TABLE IF NOT EXISTS granted_rewards (
            id SERIAL PRIMARY KEY,
            reward_id INTEGER NOT NULL REFERENCES rewards(id),
            player_id INTEGER REFERENCES players(id) ON DELETE CASCADE,
            group_id INTEGER REFERENCES player_groups(id) ON DELETE CASCADE,
            granted_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CHECK ((player_id IS NULL) <> (group_id IS NULL))
        )
        ''',
    ),
]

INDEXES: list[str] = [
    'CREATE INDEX IF NOT EXISTS idx_finished_tasks_player_id '
    'ON finished_tasks(player_id)',
    'CREATE INDEX IF NOT EXISTS idx_finished_goals_player_id '
    'ON finished_goals(player_id)',
    'CREATE INDEX IF NOT EXISTS idx_finished_goals_group_id '
    'ON finished_goals(group_id)',
    'CREATE INDEX IF NOT EXISTS idx_goals_rule_id ON goals(rule_id)',
]


def init_schema(db: DBManager) -> None:
    '''Create the tables and indexes if they don't already exist.'''
    for name, ddl in TABLES:
        db.execute(ddl)
        logger.debug(f'Ensured table {name}')
    for ddl in INDEXES:
        db.execute(ddl)
    logger.info(f'Schema ready ({len(TABLES)} tables)')
