import logging

import customtkinter as ctk

from config import load_config, log_level, save_config
from controller import ProductsController, Session, UsersController
from db import Database
from gui_dashboard import Dashboard
from gui_login import LoginFrame
from gui_utils import center_window, setup_styles, show_popup_error
from worker import DbWorker

logger = logging.getLogger(__name__)


class App(ctk.CTk):
    """One window; swaps between the login frame and the dashboard."""

    def __init__(self, db_config):
        super().__init__()
        self.title("SQL CRUD System")
        center_window(self, 1024, 768)
        self.minsize(800, 600)
        setup_styles()

        self.db_config = db_config
        self.worker = DbWorker(self)
        self.set_database(db_config)

        self.login_frame = LoginFrame(self)
        self.dashboard = Dashboard(self)
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.show_login()

    def set_database(self, db_config):
        self.db_config = db_config
        self.db = Database(db_config)
        self.session = Session(self.db)
        self.users = UsersController(self.db)
        self.products = ProductsController(self.db)
        logger.info(f"[set_database] Using {db_config.describe()}")

    def apply_config(self, db_config):
        # controllers hold the Database, rebind them all
        self.set_database(db_config)
        self.dashboard.users_tab.controller = self.users
        self.dashboard.products_tab.controller = self.products
        try:
            save_config(db_config)
        except IOError as e:
            show_popup_error(f"Settings applied but not saved: {e}", parent=self)

    def show_login(self):
        self.session.logout()
        self.dashboard.pack_forget()
        self.login_frame.reset()
        self.login_frame.pack(fill="both", expand=True)

    def show_dashboard(self):
        self.login_frame.pack_forget()
        self.dashboard.pack(fill="both", expand=True)
        self.dashboard.on_show()

    def on_close(self):
        self.worker.stop()
        self.destroy()


def main():
    logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    ctk.set_appearance_mode("dark")
    ctk.set_default_color_theme("blue")
    try:
        db_config = load_config()
    except ValueError as e:
        raise SystemExit(f"Configuration error: {str(e)}")
    app = App(db_config)
    app.mainloop()


if __name__ == "__main__":
    main()
