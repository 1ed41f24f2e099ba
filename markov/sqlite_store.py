import functools
import logging
import sqlite3
from typing import Optional, Sequence
from markov.errors import StorageError
from markov.links import Link, State
from markov.store import WeightMap, WeightStore



logger = logging.getLogger(__name__)


def word_fk(nth : int) -> str:
    """
    Name of the column holding the id of the nth word of a state.
    """
    return f"word_{nth}_id"


def schema_sql(order : int) -> str:
    """
    Builds the DDL for a chain of the given order.

    Parameters
    ----------
    order : int
        Number of word columns in `transition_from`.

    Returns
    -------
    str
        A script creating the `word`, `transition_from` and `transition`
        tables.
    """
    word_fk_defs = "".join(
        f"        {word_fk(i)} INTEGER NOT NULL REFERENCES word (id),\n"
        for i in range(order))
    word_fks = ", ".join(word_fk(i) for i in range(order))
    unique = f",\n        UNIQUE ({word_fks})" if order else ""

    return f'''
    CREATE TABLE IF NOT EXISTS word (
        id INTEGER PRIMARY KEY,
        value TEXT NOT NULL UNIQUE
    );

    CREATE TABLE IF NOT EXISTS transition_from (
{word_fk_defs}        id INTEGER PRIMARY KEY{unique}
    );

    CREATE TABLE IF NOT EXISTS transition (
        transition_from_id INTEGER NOT NULL REFERENCES transition_from (id),
        to_id INTEGER NOT NULL REFERENCES word (id),
        weight INTEGER NOT NULL,
        PRIMARY KEY (transition_from_id, to_id),
        CHECK (weight > 0)
    );
    '''


def setup_schema(
    connection : sqlite3.Connection,
    order : int) -> None:
    """
    Creates the chain tables in one transaction.

    Parameters
    ----------
    connection : sqlite3.Connection
        Open connection to the database.
    order : int
        The window order the database will hold.
    """
    try:
        connection.executescript(f"BEGIN;\n{schema_sql(order)}\nCOMMIT;")
    except sqlite3.Error as e:
        if connection.in_transaction:
            connection.rollback()
        raise StorageError(f"Failed to create chain schema: {e}") from e

    logger.info(f"Chain schema ready for order {order}")


GET_WORD = "SELECT id FROM word WHERE value = ?"

INSERT_WORD = "INSERT INTO word (value) VALUES (?)"

INCREMENT_WEIGHT = '''
    INSERT INTO transition (transition_from_id, to_id, weight)
    VALUES (?, ?, 1)
    ON CONFLICT (transition_from_id, to_id) DO UPDATE SET weight = weight + 1
'''


@functools.lru_cache(maxsize=None)
def get_transition_from_sql(order : int) -> str:
    where = " AND ".join(f"{word_fk(i)} = ?" for i in range(order))
    return f"SELECT id FROM transition_from WHERE {where}"


@functools.lru_cache(maxsize=None)
def insert_transition_from_sql(order : int) -> str:
    fields = ", ".join(word_fk(i) for i in range(order))
    values = ", ".join("?" for _ in range(order))
    return f"INSERT INTO transition_from ({fields}) VALUES ({values})"


def _join_state_words(order : int) -> str:
    return "".join(
        f" JOIN word w{i} ON w{i}.id = tf.{word_fk(i)}"
        for i in range(order))


@functools.lru_cache(maxsize=None)
def get_weights_sql(order : int) -> str:
    where = " AND ".join(f"w{i}.value = ?" for i in range(order))
    return (
        "SELECT w.value, t.weight FROM transition_from tf"
        f"{_join_state_words(order)}"
        " JOIN transition t ON t.transition_from_id = tf.id"
        " JOIN word w ON w.id = t.to_id"
        f" WHERE {where}"
        " ORDER BY t.to_id")


@functools.lru_cache(maxsize=None)
def get_random_sql(order : int) -> str:
    """
    Picks a state row with the rowid-modulo technique.

    A random offset in [1, max(rowid)] is drawn once and the first row at or
    after it is returned. Rows are never deleted, so every state is equally
    likely.
    """
    fields = ", ".join(f"w{i}.value" for i in range(order))

    return (
        f"SELECT {fields} FROM transition_from tf"
        f"{_join_state_words(order)}"
        " WHERE tf.rowid >= (SELECT abs(random()) % max(rowid) + 1"
        " FROM transition_from)"
        " ORDER BY tf.rowid LIMIT 1")


@functools.lru_cache(maxsize=None)
def get_random_starting_with_sql(order : int) -> str:
    """
    Picks one of the state rows starting with a word, uniformly.

    The matching rows are counted and a random offset below that count is
    drawn once. Takes the word twice as parameters.
    """
    fields = ", ".join(f"w{i}.value" for i in range(order))

    # max(..., 1) keeps the modulo defined when nothing matches.
    offset = (
        "(SELECT abs(random()) % max(count(*), 1)"
        f" FROM transition_from m JOIN word mw ON mw.id = m.{word_fk(0)}"
        " WHERE mw.value = ?)")

    return (
        f"SELECT {fields} FROM transition_from tf"
        f"{_join_state_words(order)}"
        " WHERE w0.value = ?"
        f" ORDER BY tf.rowid LIMIT 1 OFFSET {offset}")


class SqliteStore(WeightStore):
    """
    Chain store backed by a SQLite database laid out by `setup_schema`.

    Every learning event runs in its own transaction, so a crash can never
    leave a successor without its weight.
    """

    def __init__(
        self,
        connection : sqlite3.Connection,
        order : int) -> None:
        """
        Parameters
        ----------
        connection : sqlite3.Connection
            Open connection to a database created with `setup_schema`.
        order : int
            Window order. Must match the on-disk schema.
        """
        super().__init__(order)
        self.connection = connection
        self._check_order()


    def _check_order(self) -> None:
        try:
            columns = self.connection.execute(
                "PRAGMA table_info(transition_from)").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to inspect chain schema: {e}") from e

        if not columns:
            raise StorageError(
                "Table `transition_from` is missing, run create_db.py first")

        # Column name is the second field of each PRAGMA row.
        stored_order = sum(1 for column in columns
                           if column[1].startswith("word_"))
        if stored_order != self.order:
            raise StorageError(
                f"Database holds states of order {stored_order}, "
                f"but the chain is configured for order {self.order}")


    def _check_state(self, state : State) -> State:
        state = tuple(state)
        if len(state) != self.order:
            raise ValueError(
                f"Expected a state of {self.order} tokens, got {len(state)}")
        return state


    def _get_or_create_word(
        self,
        cursor : sqlite3.Cursor,
        value : str) -> int:
        row = cursor.execute(GET_WORD, (value,)).fetchone()
        if row is not None:
            return row[0]

        cursor.execute(INSERT_WORD, (value,))
        return cursor.lastrowid


    def _get_or_create_transition_from(
        self,
        cursor : sqlite3.Cursor,
        from_ids : Sequence[int]) -> int:
        row = cursor.execute(
            get_transition_from_sql(self.order), tuple(from_ids)).fetchone()
        if row is not None:
            return row[0]

        cursor.execute(insert_transition_from_sql(self.order), tuple(from_ids))
        return cursor.lastrowid


    def _fetch_state(
        self,
        sql : str,
        params : tuple) -> Optional[State]:
        try:
            row = self.connection.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to pick a random state: {e}") from e

        if row is None:
            return None

        if len(row) != self.order:
            raise StorageError(
                f"Corrupted state row of {len(row)} words, "
                f"expected {self.order}")

        return tuple(row)


    def get(self, state : State) -> WeightMap:
        state = self._check_state(state)

        # Without a window every state lookup is meaningless.
        if self.order == 0:
            return {}

        try:
            rows = self.connection.execute(
                get_weights_sql(self.order), state).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read weights: {e}") from e

        return {value: weight for value, weight in rows}


    def random(self) -> Optional[State]:
        if self.order == 0:
            return None

        return self._fetch_state(get_random_sql(self.order), ())


    def random_starting_with(self, token : str) -> Optional[State]:
        if self.order == 0:
            return None

        return self._fetch_state(
            get_random_starting_with_sql(self.order), (token, token))


    def increment_weight(self, link : Link) -> None:
        state = self._check_state(link.from_state)

        # Nothing can be keyed on an empty window.
        if self.order == 0:
            return

        try:
            # Commits on success, rolls back on any exception.
            with self.connection:
                cursor = self.connection.cursor()
                cursor.execute("BEGIN")
                from_ids = [self._get_or_create_word(cursor, word)
                            for word in state]
                transition_from_id = self._get_or_create_transition_from(
                    cursor, from_ids)
                to_id = self._get_or_create_word(cursor, link.to)
                cursor.execute(INCREMENT_WEIGHT, (transition_from_id, to_id))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to increment weight: {e}") from e
