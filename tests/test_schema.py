from gamification.database import start_db
from gamification.database.schema import INDEXES, TABLES, init_schema


def test_init_schema_creates_every_table_then_indexes(fake_db):
    init_schema(fake_db)
    statements = [q for q, _ in fake_db.executed]
    assert len(statements) == len(TABLES) + len(INDEXES)
    for (name, _), ddl in zip(TABLES, statements):
        assert f'CREATE TABLE IF NOT EXISTS {name}' in ddl


def test_history_tables_reference_exactly_one_owner():
    ddl = dict(TABLES)
    for table in ('finished_goals', 'granted_rewards'):
        assert '(player_id IS NULL) <> (group_id IS NULL)' in ddl[table]


def test_start_db_lists_tables(fake_db, caplog):
    fake_db.fetchall_results = [[{'table_name': 'goals'}, {'table_name': 'tasks'}]]
    with caplog.at_level('INFO'):
        start_db.run(fake_db)
    assert "['goals', 'tasks']" in caplog.text
