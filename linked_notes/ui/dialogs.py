from __future__ import annotations

from PySide6.QtWidgets import QInputDialog, QLineEdit, QMessageBox, QWidget


def ask_name(parent: QWidget, *, title: str, label: str, default: str = "") -> str | None:
    """Line-input dialog; None when canceled or left blank."""
    text, ok = QInputDialog.getText(parent, title, label, QLineEdit.EchoMode.Normal, default)
    if not ok:
        return None
    text = (text or "").strip()
    return text or None


def confirm_delete(parent: QWidget, *, title: str) -> bool:
    answer = QMessageBox.question(
        parent,
        "Delete note",
        f"Delete “{title}”?\n\nLinks to it from other notes will stop working.",
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        QMessageBox.StandardButton.No,
    )
    return answer == QMessageBox.StandardButton.Yes


def show_notice(parent: QWidget, title: str, message: str) -> None:
    msg = QMessageBox(parent)
    msg.setIcon(QMessageBox.Icon.Warning if "fail" in title.lower() else QMessageBox.Icon.Information)
    msg.setWindowTitle(title)
    msg.setText(message)
    msg.exec()
