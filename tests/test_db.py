import mysql.connector
import pytest
from mysql.connector import errorcode

from db import DbError, check_password, hash_password
from models import Product, User


def test_password_is_stored_hashed(database, server):
    database.create_user("alice", "wonderland")
    (stored,) = server.raw("SELECT Password FROM Users")[0]
    assert stored != "wonderland"
    assert check_password("wonderland", stored)


def test_check_password_tolerates_plaintext_rows():
    assert check_password("pw", "pw") is False
    assert check_password("pw", None) is False
    assert check_password("pw", hash_password("pw")) is True


class TestAuthenticate:
    @pytest.fixture(autouse=True)
    def users(self, database):
        self.alice_id = database.create_user("alice", "s3cret")
        database.create_user("bob", "hunter2")

    def test_exact_match(self, database):
        user = database.authenticate_user("alice", "s3cret")
        assert isinstance(user, User)
        assert user.id == self.alice_id
        assert user.username == "alice"

    @pytest.mark.parametrize("username, password", [
        ("alice", "wrong"),
        ("alice", "S3CRET"),
        ("alice", "s3cre"),
        ("Alice", "s3cret"),
        ("alic", "s3cret"),
        ("alice ", "s3cret"),
        ("carol", "s3cret"),
        ("bob", "s3cret"),
        ("", ""),
    ])
    def test_mismatch_is_none(self, database, username, password):
        assert database.authenticate_user(username, password) is None

    def test_plaintext_row_never_matches(self, database, server):
        server.raw("INSERT INTO Users (Username, Password) VALUES (?, ?)", ("legacy", "plain"))
        assert database.authenticate_user("legacy", "plain") is None

    def test_duplicate_usernames_checks_every_row(self, database):
        database.create_user("alice", "other")
        assert database.authenticate_user("alice", "other") is not None
        assert database.authenticate_user("alice", "s3cret").id == self.alice_id


class TestUsers:
    def test_create_and_list_in_id_order(self, database):
        ids = [database.create_user(name, "pw") for name in ("zed", "amy", "kim")]
        users = database.get_all_users()
        assert [u.id for u in users] == sorted(ids)
        assert [u.username for u in users] == ["zed", "amy", "kim"]

    def test_get_user(self, database):
        user_id = database.create_user("amy", "pw")
        assert database.get_user(user_id).username == "amy"
        assert database.get_user(999) is None

    def test_update_keeps_password_when_empty(self, database):
        user_id = database.create_user("amy", "first")
        assert database.update_user(user_id, "amy2", None) == 1
        assert database.authenticate_user("amy2", "first").id == user_id

    def test_update_changes_password(self, database):
        user_id = database.create_user("amy", "first")
        database.update_user(user_id, "amy", "second")
        assert database.authenticate_user("amy", "first") is None
        assert database.authenticate_user("amy", "second").id == user_id

    def test_update_only_touches_target(self, database):
        a = database.create_user("a", "pw")
        b = database.create_user("b", "pw")
        database.update_user(b, "b-renamed", "")
        users = {u.id: u.username for u in database.get_all_users()}
        assert users == {a: "a", b: "b-renamed"}

    def test_delete(self, database):
        a = database.create_user("a", "pw")
        b = database.create_user("b", "pw")
        assert database.delete_user(a) == 1
        assert [u.id for u in database.get_all_users()] == [b]

    def test_delete_missing_is_not_an_error(self, database):
        database.create_user("a", "pw")
        before = database.get_all_users()
        assert database.delete_user(12345) == 0
        assert database.get_all_users() == before


class TestProducts:
    def test_create_then_list(self, database):
        database.create_product("Laptop", 999.99)
        database.create_product("Mouse", 19.5)
        products = database.get_all_products()
        assert [p.name for p in products] == ["Laptop", "Mouse"]
        assert products[0].price == pytest.approx(999.99, abs=0.005)
        assert products[1].price == pytest.approx(19.5, abs=0.005)
        assert all(isinstance(p.price, float) for p in products)

    def test_name_with_quotes_is_bound_not_concatenated(self, database):
        database.create_product("Bob's \"best\"; DROP TABLE Products", 1.0)
        assert database.get_all_products()[0].name == "Bob's \"best\"; DROP TABLE Products"

    def test_get_product(self, database):
        product_id = database.create_product("Desk", 150)
        assert database.get_product(product_id) == Product(product_id, "Desk", 150.0)
        assert database.get_product(999) is None

    def test_search_is_partial_and_ordered(self, database):
        database.create_product("Laptop", 1000)
        database.create_product("Desk lamp", 20)
        database.create_product("Chair", 80)
        assert [p.name for p in database.search_products("la")] == ["Laptop", "Desk lamp"]
        assert database.search_products("zzz") == []

    def test_update_only_touches_target(self, database):
        a = database.create_product("A", 1.25)
        b = database.create_product("B", 2.5)
        assert database.update_product(a, "A2", 3.75) == 1
        products = database.get_all_products()
        assert products == [Product(a, "A2", 3.75), Product(b, "B", 2.5)]

    def test_delete_missing_leaves_list(self, database):
        database.create_product("A", 1)
        before = database.get_all_products()
        assert database.delete_product(42) == 0
        assert database.get_all_products() == before

    def test_unreadable_price_is_db_error(self, database, server):
        server.raw("INSERT INTO Products (Name, Price) VALUES (?, ?)", ("Odd", "NaN"))
        with pytest.raises(DbError, match="Cannot read product row"):
            database.get_all_products()


class TestFailures:
    def test_access_denied(self, database, server):
        server.connect_error = mysql.connector.Error(msg="denied", errno=errorcode.ER_ACCESS_DENIED_ERROR)
        with pytest.raises(DbError, match="Access denied"):
            database.get_all_users()

    def test_unknown_database(self, database, server):
        server.connect_error = mysql.connector.Error(msg="nope", errno=errorcode.ER_BAD_DB_ERROR)
        with pytest.raises(DbError, match="SampleDB"):
            database.get_all_products()

    def test_unreachable_server(self, database, server):
        server.connect_error = mysql.connector.Error(msg="Can't connect", errno=2003)
        with pytest.raises(DbError, match="localhost:3306"):
            database.authenticate_user("a", "b")

    def test_query_failure(self, database, server):
        server.raw("DROP TABLE Products")
        with pytest.raises(DbError):
            database.create_product("A", 1)

    def test_connection_closed_after_each_call(self, database, server):
        database.create_user("a", "pw")
        database.get_all_users()
        server.raw("DROP TABLE Products")
        with pytest.raises(DbError):
            database.get_all_products()
        assert server.connects == 3
        assert server.closed == 3

    def test_connects_with_config(self, database, server):
        database.get_all_users()
        assert server.connect_kwargs == database.config.connect_kwargs()


class TestUsernameTaken:
    def test_taken_and_free(self, database):
        alice = database.create_user("alice", "pw")
        assert database.username_taken("alice")
        assert not database.username_taken("bob")
        # own row does not count when renaming
        assert not database.username_taken("alice", exclude_id=alice)

    def test_overlong_password_is_db_error(self, database, monkeypatch):
        import db as db_module

        def refuse(password, salt):
            raise ValueError("password cannot be longer than 72 bytes")
        monkeypatch.setattr(db_module.bcrypt, "hashpw", refuse)
        with pytest.raises(DbError, match="Cannot store password"):
            database.create_user("alice", "x" * 80)


@pytest.mark.parametrize("call", [
    lambda d: d.get_all_users(),
    lambda d: d.delete_product(1),
])
def test_cursor_failure_closes_connection(database, server, call):
    server.cursor_error = mysql.connector.errors.OperationalError(msg="Lost connection")
    with pytest.raises(DbError, match="Lost connection"):
        call(database)
    assert server.connects == 1
    assert server.closed == 1
