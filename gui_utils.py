from tkinter import ttk, messagebox

ERROR_COLOR = "#e05252"
PRIMARY_COLOR = "#1f6aa5"
DANGER_COLOR = "#c0392b"


def center_window(window, width, height):
    """Place window in the middle of the screen."""
    screen_width = window.winfo_screenwidth()
    screen_height = window.winfo_screenheight()
    x_coordinate = (screen_width - width) // 2
    y_coordinate = (screen_height - height) // 2
    window.geometry(f"{width}x{height}+{x_coordinate}+{y_coordinate}")


def make_tree(master, columns, widths=None):
    """
    Headings-only Treeview with a vertical scrollbar, packed inside master.
    widths: optional {column: pixels}
    """
    widths = widths or {}
    tree = ttk.Treeview(master, columns=columns, show="headings", selectmode="browse", style="Crud.Treeview")
    for col in columns:
        tree.heading(col, text=col)
        tree.column(col, width=widths.get(col, 150), anchor="w")
    scrollbar = ttk.Scrollbar(master, orient="vertical", command=tree.yview)
    tree.configure(yscrollcommand=scrollbar.set)
    scrollbar.pack(side="right", fill="y")
    tree.pack(side="left", fill="both", expand=True)
    return tree


def fill_tree(tree, rows):
    """Replace all rows; rows is a list of (iid, values)."""
    tree.delete(*tree.get_children())
    for iid, values in rows:
        tree.insert("", "end", iid=str(iid), values=values)


def selected_id(tree):
    selection = tree.selection()
    selected = selection[0] if selection else tree.focus()
    if not selected:
        return None
    return int(selected)


def setup_styles():
    style = ttk.Style()
    style.theme_use("clam")
    style.configure("Crud.Treeview", font=("Arial", 12), rowheight=26)
    style.configure("Crud.Treeview.Heading", font=("Arial", 12, "bold"))


def show_popup_info(msg, title="Information", parent=None):
    messagebox.showinfo(title, msg, parent=parent)


def show_popup_error(msg, title="Error", parent=None):
    messagebox.showerror(title, msg, parent=parent)


def show_popup_question(msg, title="Confirm", parent=None):
    """
    Yes/No popup, return True/False
    """
    return messagebox.askyesno(title, msg, parent=parent)
