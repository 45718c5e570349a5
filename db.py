import logging
from threading import Lock

import bcrypt
import mysql.connector
from mysql.connector import errorcode

from models import User, Product

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

USER_COLUMNS = "Id AS id, Username AS username, Password AS password"
PRODUCT_COLUMNS = "Id AS id, Name AS name, Price AS price"


class DbError(Exception):
    """Database failure, message ready to show to the user."""


# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
PASSWORD_MAX_BYTES = 72


def hash_password(password):
    try:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()
    except ValueError as e:
        raise DbError(f"Cannot store password: {e}") from e


def check_password(password, stored):
    # rows not written by this app may hold a plaintext value; those never match
    try:
        return bcrypt.checkpw(password.encode(), (stored or "").encode())
    except ValueError:
        return False


class Database:
    """
    One configuration, one lock. Every call opens its own connection under
    the lock, so statements run one after another.
    """

    def __init__(self, config):
        self.config = config
        self._lock = Lock()

    def db_connect(self):
        try:
            return mysql.connector.connect(**self.config.connect_kwargs())
        except mysql.connector.Error as err:
            logger.warning(f"[db_connect] Cannot connect to {self.config.describe()}: {err}")
            if err.errno == errorcode.ER_ACCESS_DENIED_ERROR:
                raise DbError("Access denied, check the database username/password") from err
            if err.errno == errorcode.ER_BAD_DB_ERROR:
                raise DbError(f"Database '{self.config.database}' does not exist") from err
            raise DbError(f"Cannot connect to {self.config.host}:{self.config.port}: {err}") from err

    def _query(self, sql, params=(), one=False):
        with self._lock:
            conn = self.db_connect()
            try:
                cur = conn.cursor(dictionary=True, buffered=True)
                try:
                    cur.execute(sql, params)
                    return cur.fetchone() if one else cur.fetchall()
                finally:
                    cur.close()
            except mysql.connector.Error as err:
                logger.warning(f"[_query] Query failed: {err}")
                raise DbError(str(err)) from err
            finally:
                conn.close()

    def _execute(self, sql, params=()):
        """Run one INSERT/UPDATE/DELETE; returns (rowcount, lastrowid)."""
        with self._lock:
            conn = self.db_connect()
            try:
                cur = conn.cursor()
                try:
                    cur.execute(sql, params)
                    conn.commit()
                    logger.debug(f"[_execute] {sql.split()[0]} affected {cur.rowcount} row(s)")
                    return cur.rowcount, cur.lastrowid
                finally:
                    cur.close()
            except mysql.connector.Error as err:
                logger.warning(f"[_execute] Statement failed: {err}")
                raise DbError(str(err)) from err
            finally:
                conn.close()

    # --------- LOGIN USER ----------
    def authenticate_user(self, username, password):
        rows = self._query(f"SELECT {USER_COLUMNS} FROM Users WHERE Username=%s ORDER BY Id", (username,))
        for row in rows:
            # collation may be case-insensitive; only an exact match counts
            if row["username"] == username and check_password(password, row["password"]):
                logger.info(f"[authenticate_user] {username} authenticated")
                return User.from_row(row)
        logger.info(f"[authenticate_user] No match for {username}")
        return None

    # --------- USERS ----------
    def get_all_users(self):
        return [User.from_row(r) for r in self._query(f"SELECT {USER_COLUMNS} FROM Users ORDER BY Id")]

    def username_taken(self, username, exclude_id=None):
        """True when another row already uses this username (compared by the column collation)."""
        rows = self._query("SELECT Id AS id FROM Users WHERE Username=%s", (username,))
        return any(row["id"] != exclude_id for row in rows)

    def get_user(self, user_id):
        row = self._query(f"SELECT {USER_COLUMNS} FROM Users WHERE Id=%s", (user_id,), one=True)
        return User.from_row(row) if row else None

    def create_user(self, username, password):
        _, user_id = self._execute(
            "INSERT INTO Users (Username, Password) VALUES (%s,%s)",
            (username, hash_password(password))
        )
        return user_id

    def update_user(self, user_id, username, password=None):
        # empty password keeps the stored hash
        if password:
            rows, _ = self._execute(
                "UPDATE Users SET Username=%s, Password=%s WHERE Id=%s",
                (username, hash_password(password), user_id)
            )
        else:
            rows, _ = self._execute("UPDATE Users SET Username=%s WHERE Id=%s", (username, user_id))
        return rows

    def delete_user(self, user_id):
        rows, _ = self._execute("DELETE FROM Users WHERE Id=%s", (user_id,))
        return rows

    # --------- PRODUCTS ----------
    def _products(self, rows):
        try:
            return [Product.from_row(r) for r in rows]
        except (TypeError, ValueError) as e:
            raise DbError(f"Cannot read product row: {e}") from e

    def get_all_products(self):
        return self._products(self._query(f"SELECT {PRODUCT_COLUMNS} FROM Products ORDER BY Id"))

    def get_product(self, product_id):
        row = self._query(f"SELECT {PRODUCT_COLUMNS} FROM Products WHERE Id=%s", (product_id,), one=True)
        return self._products([row])[0] if row else None

    def search_products(self, term):
        return self._products(self._query(
            f"SELECT {PRODUCT_COLUMNS} FROM Products WHERE Name LIKE %s ORDER BY Id",
            ('%' + term + '%',)
        ))

    def create_product(self, name, price):
        _, product_id = self._execute("INSERT INTO Products (Name, Price) VALUES (%s,%s)", (name, price))
        return product_id

    def update_product(self, product_id, name, price):
        rows, _ = self._execute("UPDATE Products SET Name=%s, Price=%s WHERE Id=%s", (name, price, product_id))
        return rows

    def delete_product(self, product_id):
        rows, _ = self._execute("DELETE FROM Products WHERE Id=%s", (product_id,))
        return rows
