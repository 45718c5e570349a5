# Screen state and CRUD dispatch. Keep the GUI thin: it calls these and
# redraws from .items / .error afterwards.
import logging

from db import PASSWORD_MAX_BYTES, DbError
from models import ValidationError, parse_price

logger = logging.getLogger(__name__)


def check_password_length(password):
    if password and len(password.encode()) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")


def check_username_free(db, username, exclude_id=None):
    if db.username_taken(username, exclude_id):
        raise ValidationError("Username already taken")


def save_new_user(db, username, password):
    """Insert a user after the password and duplicate-name checks."""
    check_password_length(password)
    check_username_free(db, username)
    return db.create_user(username, password)


class Session:
    def __init__(self, db):
        self.db = db
        self.user = None
        self.error = ""

    def login(self, username, password):
        username = (username or "").strip()
        if not username or not password:
            self.error = "Username and password are required"
            return False
        try:
            user = self.db.authenticate_user(username, password)
        except DbError as e:
            self.error = f"Database error: {e}"
            return False
        if user is None:
            self.error = "Invalid username or password"
            return False
        self.user = user
        self.error = ""
        return True

    def register(self, username, password):
        username = (username or "").strip()
        if not username or not password:
            self.error = "Username and password are required"
            return False
        try:
            save_new_user(self.db, username, password)
        except ValidationError as e:
            self.error = str(e)
            return False
        except DbError as e:
            self.error = f"Database error: {e}"
            return False
        logger.info(f"[register] Account created for {username}")
        self.error = ""
        return True

    def logout(self):
        if self.user:
            logger.info(f"[logout] {self.user.username} logged out")
        self.user = None
        self.error = ""


class _ListController:
    """Shared list/selection/error handling for one table."""

    noun = "item"

    def __init__(self, db):
        self.db = db
        self.items = []
        self.error = ""
        self.selected_id = None

    def fetch(self):
        raise NotImplementedError

    def load(self):
        try:
            self.items = self.fetch()
        except DbError as e:
            self.error = f"Error loading {self.noun}s: {e}"
            return False
        self.error = ""
        return True

    def select(self, item_id):
        for item in self.items:
            if item.id == item_id:
                self.selected_id = item_id
                return item
        self.selected_id = None
        return None

    def clear_selection(self):
        self.selected_id = None

    def _mutate(self, verb, func, *args):
        # on failure leave items alone, only report
        try:
            func(*args)
        except ValidationError as e:
            self.error = str(e)
            return False
        except DbError as e:
            self.error = f"Error {verb} {self.noun}: {e}"
            return False
        self.selected_id = None
        self.error = ""
        return self.load()

    def _require_selection(self):
        if self.selected_id is None:
            self.error = f"Select a {self.noun} first"
            return False
        return True

    def delete(self, item_id):
        return self._mutate("deleting", self.remove, item_id)

    def remove(self, item_id):
        raise NotImplementedError


class UsersController(_ListController):
    noun = "user"

    def fetch(self):
        return self.db.get_all_users()

    def remove(self, user_id):
        return self.db.delete_user(user_id)

    def create(self, username, password):
        username = (username or "").strip()
        if not username or not password:
            self.error = "Username and password are required"
            return False
        return self._mutate("creating", save_new_user, self.db, username, password)

    def update(self, username, password=""):
        if not self._require_selection():
            return False
        username = (username or "").strip()
        if not username:
            self.error = "Username is required"
            return False
        return self._mutate("updating", self._save, self.selected_id, username, password or None)

    def _save(self, user_id, username, password):
        check_password_length(password)
        check_username_free(self.db, username, exclude_id=user_id)
        return self.db.update_user(user_id, username, password)


class ProductsController(_ListController):
    noun = "product"

    def __init__(self, db):
        super().__init__(db)
        self.search_term = ""

    def fetch(self):
        if self.search_term:
            return self.db.search_products(self.search_term)
        return self.db.get_all_products()

    def remove(self, product_id):
        return self.db.delete_product(product_id)

    def search(self, term):
        self.search_term = (term or "").strip()
        return self.load()

    def _read_form(self, name, price_text):
        name = (name or "").strip()
        if not name or not (price_text or "").strip():
            raise ValidationError("Name and price are required")
        return name, parse_price(price_text)

    def create(self, name, price_text):
        try:
            name, price = self._read_form(name, price_text)
        except ValidationError as e:
            self.error = str(e)
            return False
        return self._mutate("creating", self.db.create_product, name, price)

    def update(self, name, price_text):
        if not self._require_selection():
            return False
        try:
            name, price = self._read_form(name, price_text)
        except ValidationError as e:
            self.error = str(e)
            return False
        return self._mutate("updating", self.db.update_product, self.selected_id, name, price)
