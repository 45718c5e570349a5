import customtkinter as ctk

from gui_utils import (DANGER_COLOR, ERROR_COLOR, fill_tree, make_tree, selected_id,
                       show_popup_error, show_popup_info, show_popup_question)
from models import format_price


class Dashboard(ctk.CTkFrame):
    def __init__(self, app):
        super().__init__(app)
        self.app = app
        self.build_ui()

    def build_ui(self):
        top = ctk.CTkFrame(self)
        top.pack(fill="x", padx=10, pady=(10, 0))
        ctk.CTkLabel(top, text="SQL CRUD System", font=("Arial", 18, "bold")).pack(side="left", padx=10, pady=8)
        ctk.CTkButton(top, text="Logout", command=self.logout, fg_color=DANGER_COLOR, width=90).pack(side="right", padx=10)
        self.lbl_user = ctk.CTkLabel(top, text="")
        self.lbl_user.pack(side="right", padx=10)

        self.tabs = ctk.CTkTabview(self, command=self.on_tab_change)
        self.tabs.pack(fill="both", expand=True, padx=10, pady=10)
        self.users_tab = UsersTab(self.tabs.add("Users"), self.app)
        self.users_tab.pack(fill="both", expand=True)
        self.products_tab = ProductsTab(self.tabs.add("Products"), self.app)
        self.products_tab.pack(fill="both", expand=True)

    def on_show(self):
        user = self.app.session.user
        self.lbl_user.configure(text=f"Logged in as: {user.username}" if user else "")
        self.users_tab.refresh()
        self.products_tab.refresh()

    def on_tab_change(self):
        if self.tabs.get() == "Users":
            self.users_tab.refresh()
        else:
            self.products_tab.refresh()

    def logout(self):
        if show_popup_question("Do you want to log out?", title="Logout", parent=self.app):
            self.app.show_login()


class _CrudTab(ctk.CTkFrame):
    """List + form + action buttons for one table, driven by a controller."""

    columns = ()
    widths = {}
    field_labels = ()

    def __init__(self, master, app, controller):
        super().__init__(master, fg_color="transparent")
        self.app = app
        self.controller = controller
        self.entries = {}
        self.buttons = []
        self.build_ui()

    def build_ui(self):
        form = ctk.CTkFrame(self)
        form.pack(fill="x", pady=(0, 5))
        for col, label in enumerate(self.field_labels):
            ctk.CTkLabel(form, text=f"{label}:").grid(row=0, column=col * 2, padx=(10, 4), pady=8)
            entry = ctk.CTkEntry(form, width=200)
            entry.grid(row=0, column=col * 2 + 1, padx=(0, 10), pady=8)
            self.entries[label] = entry

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.pack(fill="x")
        for text, command, color in (
            ("Add", self.add_item, None),
            ("Update", self.update_item, None),
            ("Delete", self.delete_item, DANGER_COLOR),
            ("Clear", self.clear_form, "gray40"),
            ("Refresh", self.refresh, "gray40"),
        ):
            kwargs = {"fg_color": color} if color else {}
            btn = ctk.CTkButton(actions, text=text, command=command, width=90, **kwargs)
            btn.pack(side="left", padx=5, pady=5)
            self.buttons.append(btn)
        self.build_extra(actions)

        self.lbl_error = ctk.CTkLabel(self, text="", text_color=ERROR_COLOR, anchor="w")
        self.lbl_error.pack(fill="x", padx=5)

        list_frame = ctk.CTkFrame(self)
        list_frame.pack(fill="both", expand=True, pady=5)
        self.tree = make_tree(list_frame, self.columns, self.widths)
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

    def build_extra(self, actions):
        pass

    # --- form helpers
    def form_values(self):
        return [self.entries[label].get() for label in self.field_labels]

    def set_form(self, values):
        for label, value in zip(self.field_labels, values):
            self.entries[label].delete(0, "end")
            self.entries[label].insert(0, value)

    def clear_form(self):
        self.set_form([""] * len(self.field_labels))
        self.controller.clear_selection()
        self.tree.selection_remove(*self.tree.selection())

    # --- background dispatch
    def run(self, func, *args, on_done=None):
        # jobs queue up behind each other; buttons stay disabled until ours is back
        self.set_busy(True)
        self.app.worker.submit(func, *args, on_done=on_done or self.after_job, on_error=self.after_error)

    def set_busy(self, busy):
        for btn in self.buttons:
            btn.configure(state="disabled" if busy else "normal")

    def after_job(self, ok):
        self.set_busy(False)
        self.render()

    def after_mutation(self, ok):
        self.after_job(ok)
        if ok:
            self.clear_form()

    def after_error(self, exc):
        self.set_busy(False)
        show_popup_error(str(exc), parent=self.app)

    def render(self):
        fill_tree(self.tree, [(item.id, self.row_values(item)) for item in self.controller.items])
        self.lbl_error.configure(text=self.controller.error)

    # --- actions
    def refresh(self):
        self.run(self.controller.load)

    def on_select(self, event=None):
        item_id = selected_id(self.tree)
        if item_id is None:
            return
        item = self.controller.select(item_id)
        if item is not None:
            self.set_form(self.form_from(item))

    def add_item(self):
        self.run(self.controller.create, *self.form_values(), on_done=self.after_mutation)

    def update_item(self):
        self.run(self.controller.update, *self.form_values(), on_done=self.after_mutation)

    def delete_item(self):
        item_id = selected_id(self.tree)
        if item_id is None:
            self.lbl_error.configure(text=f"Select a {self.controller.noun} first")
            return
        if show_popup_question(f"Delete {self.controller.noun} #{item_id}?", title="Confirm Delete", parent=self.app):
            self.run(self.controller.delete, item_id, on_done=self.after_mutation)

    def row_values(self, item):
        raise NotImplementedError

    def form_from(self, item):
        raise NotImplementedError


class UsersTab(_CrudTab):
    columns = ("ID", "Username", "Password")
    widths = {"ID": 60, "Username": 250, "Password": 150}
    field_labels = ("Username", "Password")

    def __init__(self, master, app):
        super().__init__(master, app, app.users)

    def build_ui(self):
        super().build_ui()
        self.entries["Password"].configure(show="*")
        self.entries["Password"].configure(placeholder_text="unchanged if empty")

    def row_values(self, user):
        return (user.id, user.username, "********")

    def form_from(self, user):
        # stored value is a hash; leave blank so it stays unless retyped
        return (user.username, "")


class ProductsTab(_CrudTab):
    columns = ("ID", "Name", "Price")
    widths = {"ID": 60, "Name": 300, "Price": 120}
    field_labels = ("Name", "Price")

    def __init__(self, master, app):
        super().__init__(master, app, app.products)

    def build_extra(self, actions):
        self.ent_search = ctk.CTkEntry(actions, width=180, placeholder_text="Search name...")
        self.ent_search.pack(side="right", padx=5)
        btn = ctk.CTkButton(actions, text="Search", command=self.search, width=90)
        btn.pack(side="right", padx=5)
        self.buttons.append(btn)
        self.ent_search.bind("<Return>", lambda e: self.search())

    def row_values(self, product):
        return (product.id, product.name, format_price(product.price))

    def form_from(self, product):
        return (product.name, f"{product.price:.2f}")

    def search(self):
        self.run(self.controller.search, self.ent_search.get(), on_done=self.after_search)

    def after_search(self, ok):
        self.after_job(ok)
        if ok and self.controller.search_term and not self.controller.items:
            show_popup_info("No products found!", title="Search Result", parent=self.app)

    def refresh(self):
        # Refresh shows the whole table again
        self.ent_search.delete(0, "end")
        self.run(self.controller.search, "")
