"""In-window overlay for transient game messages (correct, level up, game over)."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt, QEvent, QTimer, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from puzzlerace.core.notifications import Notification, NotificationKind
from puzzlerace.ui.colors import GameColors, severity_color

_ICONS = {
    NotificationKind.CORRECT: "✓",
    NotificationKind.LEVEL_UP: "★",
    NotificationKind.WIN: "🏆",
    NotificationKind.INCORRECT: "✗",
    NotificationKind.TIMEOUT: "⏱",
    NotificationKind.POOL_EXHAUSTED: "!",
}


def _card_container(radius: int = 12, object_name: str = "messageContainer") -> QFrame:
    container = QFrame()
    container.setObjectName(object_name)
    container.setMinimumWidth(400)
    container.setMaximumWidth(520)
    container.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: {GameColors.CARD_BG};
            border: 2px solid {GameColors.CARD_BORDER};
            border-radius: {radius}px;
        }}
        """
    )
    shadow = QGraphicsDropShadowEffect(container)
    shadow.setBlurRadius(20)
    shadow.setOffset(0, 6)
    shadow.setColor(QColor(0, 0, 0, 40))
    container.setGraphicsEffect(shadow)
    return container


def _overlay_background(parent: QWidget, on_click: Callable[[], None]) -> QWidget:
    overlay_bg = QWidget(parent)
    overlay_bg.setStyleSheet("background: rgba(0, 0, 0, 0.35);")
    overlay_bg.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
    overlay_bg.setMinimumSize(1, 1)
    overlay_bg.mousePressEvent = lambda e: on_click()
    return overlay_bg


class MessageOverlay(QWidget):
    """Covers the parent with a dimmed backdrop and a centered message card.

    Hides itself after ``duration_ms`` or when clicked, then emits ``closed``.
    """

    closed = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        main_layout = QGridLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)
        main_layout.setRowStretch(0, 1)
        main_layout.setColumnStretch(0, 1)

        main_layout.addWidget(_overlay_background(self, self.dismiss), 0, 0)

        container = _card_container()
        content = QVBoxLayout(container)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(14)

        header = QHBoxLayout()
        header.setSpacing(12)
        self._icon = QLabel("")
        self._icon.setFixedSize(44, 44)
        self._icon.setAlignment(Qt.AlignCenter)
        header.addWidget(self._icon, 0)

        self._title = QLabel("")
        self._title.setWordWrap(True)
        header.addWidget(self._title, 1)
        content.addLayout(header)

        self._text = QLabel("")
        self._text.setWordWrap(True)
        self._text.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 14px;")
        content.addWidget(self._text, 0)

        main_layout.addWidget(container, 0, 0, 1, 1, Qt.AlignCenter)

        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.timeout.connect(self.dismiss)
        self.hide()

    def show_message(self, notification: Notification, duration_ms: int = 2500) -> None:
        color = severity_color(notification.severity)
        self._icon.setText(_ICONS.get(notification.kind, "i"))
        self._icon.setStyleSheet(
            f"color: {color}; font-size: 24px; font-weight: 900;"
            f" border: 2px solid {color}; border-radius: 22px;"
        )
        self._title.setText(notification.title)
        self._title.setStyleSheet(f"color: {color}; font-size: 18px; font-weight: 800;")
        self._text.setText(notification.text)
        self._update_geometry()
        self.raise_()
        self.show()
        self._hide_timer.start(duration_ms)

    def dismiss(self) -> None:
        self._hide_timer.stop()
        if self.isVisible():
            self.hide()
            self.closed.emit()

    def _update_geometry(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())

    def eventFilter(self, obj: QWidget, event: QEvent) -> bool:
        if obj is self.parentWidget() and event.type() == QEvent.Type.Resize:
            self._update_geometry()
        return super().eventFilter(obj, event)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._update_geometry()
        parent = self.parentWidget()
        if parent is not None:
            parent.installEventFilter(self)

    def hideEvent(self, event) -> None:
        parent = self.parentWidget()
        if parent is not None:
            parent.removeEventFilter(self)
        super().hideEvent(event)
