import logging
import os
import sqlite3
from markov.sqlite_store import setup_schema
from utils import load_config, setup_logging



logger = logging.getLogger(__name__)


def create_database(
    db_path : str,
    order : int) -> None:
    """
    Create a SQLite database holding a chain of the given order.

    Parameters
    ----------
    db_path : str
        File path for the new SQLite database.
    order : int
        Window order. The chain must be run with the same value.
    """
    # Ensure the database directory exists
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        setup_schema(conn, order)
    finally:
        conn.close()

    logger.info(f"Successfully created database at {db_path}")



if __name__ == "__main__":

    config = load_config("config.yaml")
    setup_logging(config["log_path"])

    if not config["sqlite_path"]:
        raise SystemExit("Set `sqlite_path` in config.yaml first.")

    create_database(
        db_path=config["sqlite_path"],
        order=config["order"])
