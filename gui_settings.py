import customtkinter as ctk

from config import DbConfig
from gui_utils import ERROR_COLOR, center_window


class SettingsDialog(ctk.CTkToplevel):
    """Edit the database connection; on_save(DbConfig) gets the new values."""

    FIELDS = (
        ("host", "Server:"),
        ("port", "Port:"),
        ("database", "Database:"),
        ("user", "Username:"),
        ("password", "Password:"),
    )

    def __init__(self, master, cfg, on_save):
        super().__init__(master)
        self.title("Database Configuration")
        self.resizable(False, False)
        center_window(self, 380, 330)
        self.on_save = on_save
        self.entries = {}

        form = ctk.CTkFrame(self)
        form.pack(padx=15, pady=15, fill="both", expand=True)
        for row, (field, label) in enumerate(self.FIELDS):
            ctk.CTkLabel(form, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=5)
            entry = ctk.CTkEntry(form, width=220, show="*" if field == "password" else "")
            entry.insert(0, str(getattr(cfg, field)))
            entry.grid(row=row, column=1, padx=8, pady=5)
            self.entries[field] = entry

        self.lbl_error = ctk.CTkLabel(form, text="", text_color=ERROR_COLOR)
        self.lbl_error.grid(row=len(self.FIELDS), column=0, columnspan=2)

        btns = ctk.CTkFrame(self, fg_color="transparent")
        btns.pack(pady=(0, 15))
        ctk.CTkButton(btns, text="Save", command=self.save, width=120).pack(side="left", padx=10)
        ctk.CTkButton(btns, text="Cancel", command=self.destroy, width=120, fg_color="gray40").pack(side="left", padx=10)

        self.after(100, self.grab_set)

    def save(self):
        values = {field: entry.get().strip() for field, entry in self.entries.items()}
        values["password"] = self.entries["password"].get()
        try:
            values["port"] = int(values["port"])
        except ValueError:
            self.lbl_error.configure(text="Port must be a number")
            return
        if not values["host"] or not values["database"]:
            self.lbl_error.configure(text="Server and database are required")
            return
        self.on_save(DbConfig(**values))
        self.destroy()
