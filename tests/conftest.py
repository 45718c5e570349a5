import sqlite3
from decimal import Decimal

import mysql.connector
import pytest

import db as db_module
from config import DbConfig
from db import Database

# DECIMAL columns come back as Decimal, like they do from MySQL
sqlite3.register_converter("DECIMAL", lambda b: Decimal(b.decode()))

# NOCASE mimics MySQL's default case-insensitive collation
SCHEMA = """
CREATE TABLE Users (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Username TEXT COLLATE NOCASE NOT NULL,
    Password TEXT NOT NULL
);
CREATE TABLE Products (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL,
    Price DECIMAL(10,2) NOT NULL
);
"""


class FakeCursor:
    def __init__(self, server, dictionary=False):
        self.server = server
        self.dictionary = dictionary
        self._cur = server.conn.cursor()

    def execute(self, sql, params=()):
        self.server.statements.append((sql, tuple(params)))
        try:
            self._cur.execute(sql.replace("%s", "?"), tuple(params))
        except sqlite3.Error as e:
            raise mysql.connector.errors.ProgrammingError(msg=str(e))

    def _row(self, row):
        if row is None or not self.dictionary:
            return row
        names = [d[0] for d in self._cur.description]
        return dict(zip(names, row))

    def fetchone(self):
        return self._row(self._cur.fetchone())

    def fetchall(self):
        return [self._row(r) for r in self._cur.fetchall()]

    @property
    def rowcount(self):
        return self._cur.rowcount

    @property
    def lastrowid(self):
        return self._cur.lastrowid

    def close(self):
        self._cur.close()


class FakeConnection:
    def __init__(self, server):
        self.server = server

    def cursor(self, dictionary=False, buffered=False):
        if self.server.cursor_error is not None:
            raise self.server.cursor_error
        return FakeCursor(self.server, dictionary=dictionary)

    def commit(self):
        self.server.conn.commit()

    def close(self):
        self.server.closed += 1


class FakeServer:
    """In-memory stand-in for a MySQL server, reached via mysql.connector.connect."""

    def __init__(self):
        self.conn = sqlite3.connect(":memory:", detect_types=sqlite3.PARSE_DECLTYPES, check_same_thread=False)
        self.conn.executescript(SCHEMA)
        self.statements = []
        self.connects = 0
        self.closed = 0
        self.connect_error = None
        self.cursor_error = None
        self.connect_kwargs = None

    def connect(self, **kwargs):
        self.connect_kwargs = kwargs
        if self.connect_error is not None:
            raise self.connect_error
        self.connects += 1
        return FakeConnection(self)

    def raw(self, sql, params=()):
        cur = self.conn.execute(sql, params)
        self.conn.commit()
        return cur.fetchall()


@pytest.fixture
def server(monkeypatch):
    server = FakeServer()
    monkeypatch.setattr(db_module.mysql.connector, "connect", server.connect)
    monkeypatch.setattr(db_module, "BCRYPT_ROUNDS", 4)
    yield server
    server.conn.close()


@pytest.fixture
def database(server):
    return Database(DbConfig())
