import customtkinter as ctk

from gui_settings import SettingsDialog
from gui_utils import ERROR_COLOR, PRIMARY_COLOR, show_popup_info


class LoginFrame(ctk.CTkFrame):
    def __init__(self, app):
        super().__init__(app)
        self.app = app
        self.build_ui()

    def build_ui(self):
        box = ctk.CTkFrame(self)
        box.pack(pady=80, padx=20)
        ctk.CTkLabel(box, text="SQL CRUD System", font=("Arial", 20, "bold")).pack(pady=20, padx=40)
        ctk.CTkLabel(box, text="Username:").pack()
        self.ent_user = ctk.CTkEntry(box, width=220)
        self.ent_user.pack(pady=5)
        ctk.CTkLabel(box, text="Password:").pack()
        self.ent_pass = ctk.CTkEntry(box, show="*", width=220)
        self.ent_pass.pack(pady=5)
        self.btn_login = ctk.CTkButton(box, text="Login", command=self.try_login, fg_color=PRIMARY_COLOR)
        self.btn_login.pack(pady=(10, 5))
        self.btn_register = ctk.CTkButton(box, text="Register", command=self.try_register, fg_color="gray40")
        self.btn_register.pack(pady=(0, 10))
        self.lbl_error = ctk.CTkLabel(box, text="", text_color=ERROR_COLOR, wraplength=300)
        self.lbl_error.pack(pady=5)
        ctk.CTkButton(box, text="Database Settings", command=self.open_settings, fg_color="gray40").pack(pady=(10, 20))
        self.ent_user.bind("<Return>", lambda e: self.try_login())
        self.ent_pass.bind("<Return>", lambda e: self.try_login())
        self.ent_user.focus()

    def try_login(self):
        if self.app.worker.busy:
            return
        self.btn_login.configure(state="disabled")
        self.app.worker.submit(
            self.app.session.login, self.ent_user.get(), self.ent_pass.get(),
            on_done=self.after_login, on_error=self.after_error,
        )

    def after_login(self, ok):
        self.btn_login.configure(state="normal")
        if ok:
            self.ent_pass.delete(0, "end")
            self.lbl_error.configure(text="")
            self.app.show_dashboard()
        else:
            self.lbl_error.configure(text=self.app.session.error)

    def after_error(self, exc):
        self.btn_login.configure(state="normal")
        self.btn_register.configure(state="normal")
        self.lbl_error.configure(text=f"Request failed: {exc}")

    def try_register(self):
        if self.app.worker.busy:
            return
        self.btn_register.configure(state="disabled")
        self.app.worker.submit(
            self.app.session.register, self.ent_user.get(), self.ent_pass.get(),
            on_done=self.after_register, on_error=self.after_error,
        )

    def after_register(self, ok):
        self.btn_register.configure(state="normal")
        if ok:
            self.lbl_error.configure(text="")
            show_popup_info("Account created, you can log in now.", title="Register", parent=self.app)
        else:
            self.lbl_error.configure(text=self.app.session.error)

    def reset(self):
        self.ent_user.delete(0, "end")
        self.ent_pass.delete(0, "end")
        self.lbl_error.configure(text="")
        self.ent_user.focus()

    def open_settings(self):
        SettingsDialog(self.app, self.app.db_config, on_save=self.app.apply_config)
