"""Schema for games and wagers."""
from database.db import get_connection


TABLES = ['wagers', 'games']


def init_db(db_path=None):
    """Create tables and indexes if they do not exist."""
    conn = get_connection(db_path)
    cursor = conn.cursor()

    # Games table - state is NP / IP / FINAL, scores only set when FINAL
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS games (
            id TEXT PRIMARY KEY,
            home_team TEXT NOT NULL,
            away_team TEXT NOT NULL,
            start_time TEXT NOT NULL,
            neutral_site INTEGER NOT NULL DEFAULT 0,
            state TEXT NOT NULL DEFAULT 'NP',
            home_score INTEGER,
            away_score INTEGER,
            CHECK (state IN ('NP', 'IP', 'FINAL'))
        )
    """)

    # Wagers table - one row per tracked bet, keyed by owner
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS wagers (
            id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            game_id TEXT NOT NULL,
            kind TEXT NOT NULL,
            selection TEXT NOT NULL,
            condition_json TEXT,
            odds DOUBLE PRECISION NOT NULL,
            stake DOUBLE PRECISION NOT NULL,
            result TEXT NOT NULL DEFAULT 'pending',
            placed_at TEXT NOT NULL,
            settled_at TEXT,
            PRIMARY KEY (user_id, id),
            FOREIGN KEY (game_id) REFERENCES games(id),
            CHECK (kind IN ('moneyline', 'spread', 'total')),
            CHECK (result IN ('pending', 'won', 'lost', 'push')),
            CHECK (odds <> 0),
            CHECK (stake > 0)
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_wagers_game_result ON wagers(game_id, result)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_wagers_user ON wagers(user_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_games_state ON games(state)")

    conn.commit()
    conn.close()


def reset_db(db_path=None):
    """Drop all tables and recreate them."""
    conn = get_connection(db_path)
    cursor = conn.cursor()
    for table in TABLES:
        cursor.execute(f"DROP TABLE IF EXISTS {table}")
    conn.commit()
    conn.close()
    init_db(db_path)
