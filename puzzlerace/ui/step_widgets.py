"""Play screen widgets: the two step drop areas and the countdown bar."""

from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import QMimeData, QSize, Qt, Signal
from PySide6.QtWidgets import (
    QAbstractItemView,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)

from puzzlerace.core.session import Area
from puzzlerace.ui.colors import GameColors, timer_color
from puzzlerace.ui.models import StepCard

STEP_MIME_TYPE = "application/x-puzzlerace-step"


def encode_drag(area: Area, step_id: str) -> bytes:
    return f"{area.value}\n{step_id}".encode("utf-8")


def decode_drag(payload: bytes) -> tuple[Area, str]:
    area, _, step_id = bytes(payload).decode("utf-8").partition("\n")
    return Area.parse(area), step_id


class StepCardWidget(QWidget):
    """Title, description and phase tag of one step."""

    def __init__(self, card: StepCard, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(2)

        title = QLabel(card.title)
        title.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-weight: 700; font-size: 14px;")
        layout.addWidget(title)

        if card.description:
            description = QLabel(card.description)
            description.setWordWrap(True)
            description.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 12px;")
            layout.addWidget(description)

        tag = QLabel(card.phase_label)
        tag.setStyleSheet(
            f"color: white; background: {card.color}; border-radius: 8px;"
            " padding: 2px 8px; font-size: 11px; font-weight: 600;"
        )
        layout.addWidget(tag, 0, Qt.AlignLeft)


class StepListWidget(QListWidget):
    """One drop area. Drops are reported, never applied locally.

    ``stepDropped(step_id, from_area, to_area)`` fires when a step from the
    other area is dropped here; ``stepActivated(step_id, from_area)`` fires on
    double-click so steps can be moved without dragging. The owner applies
    the move to the engine and repopulates both lists.
    """

    stepDropped = Signal(str, str, str)
    stepActivated = Signal(str, str)

    def __init__(self, area: Area, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._area = area
        self.setDragDropMode(QAbstractItemView.DragDrop)
        self.setDefaultDropAction(Qt.MoveAction)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setSpacing(4)
        self.setMinimumWidth(320)
        self.setStyleSheet(
            f"""
            QListWidget {{
                background: {GameColors.CARD_BG};
                border: 2px dashed {GameColors.CARD_BORDER};
                border-radius: 8px;
            }}
            QListWidget::item {{
                border: 1px solid {GameColors.CARD_BORDER};
                border-radius: 6px;
            }}
            """
        )
        self.itemDoubleClicked.connect(self._on_double_click)

    @property
    def area(self) -> Area:
        return self._area

    def set_steps(self, cards: Sequence[StepCard]) -> None:
        self.clear()
        for card in cards:
            item = QListWidgetItem(self)
            item.setData(Qt.UserRole, card.step_id)
            widget = StepCardWidget(card)
            item.setSizeHint(widget.sizeHint().expandedTo(QSize(0, 64)))
            self.setItemWidget(item, widget)

    def mimeTypes(self) -> list[str]:
        return [STEP_MIME_TYPE]

    def mimeData(self, items) -> QMimeData:
        mime = QMimeData()
        if items:
            mime.setData(STEP_MIME_TYPE, encode_drag(self._area, str(items[0].data(Qt.UserRole))))
        return mime

    def dragEnterEvent(self, event) -> None:
        if event.mimeData().hasFormat(STEP_MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event) -> None:
        if event.mimeData().hasFormat(STEP_MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event) -> None:
        mime = event.mimeData()
        if not mime.hasFormat(STEP_MIME_TYPE):
            event.ignore()
            return
        source_area, step_id = decode_drag(mime.data(STEP_MIME_TYPE).data())
        # The list is rebuilt from the engine, so Qt must not move the item itself.
        event.setDropAction(Qt.IgnoreAction)
        event.accept()
        if source_area is not self._area:
            self.stepDropped.emit(step_id, source_area.value, self._area.value)

    def _on_double_click(self, item: QListWidgetItem) -> None:
        self.stepActivated.emit(str(item.data(Qt.UserRole)), self._area.value)


class CountdownBar(QProgressBar):
    """Thin bar that drains and shifts toward red as the puzzle clock runs out."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setRange(0, 1000)
        self.setTextVisible(False)
        self.setFixedHeight(8)
        self.set_fraction(1.0)

    def set_fraction(self, fraction: float) -> None:
        fraction = max(0.0, min(1.0, fraction))
        self.setValue(int(round(fraction * 1000)))
        self.setStyleSheet(
            f"""
            QProgressBar {{
                background: {GameColors.TIMER_TRACK};
                border: none;
                border-radius: 4px;
            }}
            QProgressBar::chunk {{
                background: {timer_color(fraction)};
                border-radius: 4px;
            }}
            """
        )
