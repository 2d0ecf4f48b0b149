import os
import sqlite3
import tempfile

from foodly.db import init_db, make_engine


def table_sql(path: str) -> dict:
    conn = sqlite3.connect(path)
    try:
        rows = conn.execute("SELECT name, sql FROM sqlite_master WHERE type='table' AND name != 'sqlite_sequence'")
        return dict(rows.fetchall())
    finally:
        conn.close()


def test_init_db_creates_tables():
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "foodly.db")
        engine = make_engine(f"sqlite:///{db_path}")
        try:
            init_db(engine)
        finally:
            engine.dispose()

        tables = table_sql(db_path)
        assert set(tables) == {"users", "orders", "cart_history"}

        conn = sqlite3.connect(db_path)
        try:
            cols = [r[1] for r in conn.execute("PRAGMA table_info(cart_history)").fetchall()]
        finally:
            conn.close()
        assert cols == ["id", "username", "item_id", "item_name", "quantity", "price", "added_date"]


def test_init_db_twice_is_harmless():
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "foodly.db")
        engine = make_engine(f"sqlite:///{db_path}")
        try:
            init_db(engine)
            before = table_sql(db_path)
            init_db(engine)
        finally:
            engine.dispose()

        assert table_sql(db_path) == before


def test_init_db_keeps_existing_tables_and_rows():
    # Layout written by earlier deployments of the service
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "foodly.db")
        conn = sqlite3.connect(db_path)
        try:
            conn.execute(
                "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, username TEXT UNIQUE NOT NULL, "
                "password TEXT NOT NULL, created_at DATETIME DEFAULT CURRENT_TIMESTAMP)"
            )
            conn.execute("INSERT INTO users (username, password) VALUES ('legacy', 'pw')")
            conn.commit()
        finally:
            conn.close()
        users_sql = table_sql(db_path)["users"]

        engine = make_engine(f"sqlite:///{db_path}")
        try:
            init_db(engine)
        finally:
            engine.dispose()

        tables = table_sql(db_path)
        assert tables["users"] == users_sql
        assert {"orders", "cart_history"} <= set(tables)
        conn = sqlite3.connect(db_path)
        try:
            assert conn.execute("SELECT username FROM users").fetchall() == [("legacy",)]
        finally:
            conn.close()
