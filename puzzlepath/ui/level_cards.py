"""Level selection UI: LevelCard and LevelMapWidget."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt, QPointF
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import (
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from puzzlepath.ui.colors import blend_hex, star_text
from puzzlepath.ui.models import LevelState


class LevelCard(QWidget):
    """A clickable level card showing its number, name, lock and best stars."""

    def __init__(
        self,
        *,
        base_color: str,
        on_click: Callable[[int], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._base_color = base_color
        self._on_click = on_click
        self._level_index: Optional[int] = None
        self._unlocked: bool = True

        self.setObjectName("levelCard")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_Hover, True)
        self.setCursor(Qt.PointingHandCursor)

        header = QWidget()
        header.setObjectName("levelCardHeader")
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(10, 8, 10, 8)
        header_layout.setSpacing(8)

        self._title = QLabel("")
        self._title.setObjectName("levelCardTitle")
        self._title.setWordWrap(True)
        self._title.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)

        self._lock_badge = QLabel("🔒")
        self._lock_badge.setObjectName("levelCardLockBadge")
        self._lock_badge.setAlignment(Qt.AlignCenter)
        self._lock_badge.setFixedSize(24, 24)

        header_layout.addWidget(self._title, 1)
        header_layout.addWidget(self._lock_badge, 0, Qt.AlignRight)

        self._center = QLabel("")
        self._center.setObjectName("levelCardCenter")
        self._center.setAlignment(Qt.AlignCenter)
        self._center.setMinimumHeight(64)

        self._start_pill = QLabel("Play")
        self._start_pill.setObjectName("levelCardStartPill")
        self._start_pill.setAlignment(Qt.AlignCenter)
        self._start_pill.setFixedHeight(30)
        self._start_pill.setVisible(False)

        self._stars = QLabel("")
        self._stars.setObjectName("levelCardStars")
        self._stars.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 12, 14, 12)
        layout.setSpacing(10)
        layout.addWidget(header, 0)
        layout.addStretch(1)
        layout.addWidget(self._center, 0, Qt.AlignCenter)
        layout.addWidget(self._start_pill, 0, Qt.AlignHCenter)
        layout.addStretch(1)
        layout.addWidget(self._stars)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(26)
        shadow.setOffset(0, 10)
        shadow.setColor(QColor(15, 23, 42, 80))
        self.setGraphicsEffect(shadow)

        self._apply_styles()

    def _apply_styles(self) -> None:
        card_top = blend_hex(self._base_color, "#FFFFFF", 0.18)
        card_bottom = blend_hex(self._base_color, "#000000", 0.08)
        self.setStyleSheet(
            f"""
            QWidget#levelCard {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {card_top},
                    stop:1 {card_bottom}
                );
                border-radius: 16px;
                border: 1px solid rgba(255, 255, 255, 0.40);
            }}
            QWidget#levelCard:hover {{
                border: 1px solid rgba(255, 255, 255, 0.68);
            }}
            QWidget#levelCardHeader {{
                background: rgba(255, 255, 255, 0.18);
                border-radius: 12px;
            }}
            QLabel#levelCardTitle {{
                color: rgba(255, 255, 255, 0.95);
                font-weight: 900;
                font-size: 13px;
            }}
            QLabel#levelCardLockBadge {{
                background: rgba(255, 255, 255, 0.30);
                border-radius: 12px;
                font-size: 13px;
            }}
            QLabel#levelCardCenter {{
                color: rgba(255, 255, 255, 0.96);
                font-weight: 900;
                font-size: 28px;
            }}
            QLabel#levelCardStartPill {{
                background: rgba(255, 255, 255, 0.92);
                color: rgba(15, 23, 42, 0.74);
                padding: 0px 14px;
                border-radius: 15px;
                font-size: 12px;
                font-weight: 900;
            }}
            QLabel#levelCardStars {{
                color: #fde68a;
                font-size: 20px;
            }}
            """
        )

    def set_state(self, state: LevelState) -> None:
        self._level_index = state.level.index
        self._unlocked = bool(state.unlocked)
        self._title.setText(state.level.name)
        self._stars.setText(star_text(state.best_stars))

        if self._unlocked:
            self._lock_badge.setVisible(False)
            self._center.setText(str(state.level.id))
            self._start_pill.setVisible(state.is_current)
            self.setToolTip(f"{state.level.name}\nBest: {state.best_stars}/3 stars")
        else:
            self._lock_badge.setVisible(True)
            self._center.setText("🔒")
            self._start_pill.setVisible(False)
            self.setToolTip(f"{state.level.name}\nLocked")
        self.update()

    def mousePressEvent(self, event) -> None:
        if self._unlocked and self._level_index is not None:
            self._on_click(self._level_index)
        super().mousePressEvent(event)


class LevelMapWidget(QWidget):
    """A canvas that places LevelCards in a zig-zag 'journey map' with connectors."""

    def __init__(
        self,
        *,
        base_color: str,
        on_level_clicked: Callable[[int], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._base_color = base_color
        self._on_level_clicked = on_level_clicked
        self._cards: list[LevelCard] = []
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("background: transparent;")
        self.setMinimumHeight(360)

    def set_base_color(self, color: str) -> None:
        if color == self._base_color:
            return
        self._base_color = color
        for card in self._cards:
            card.deleteLater()
        self._cards = []

    def set_level_states(self, states: list[LevelState]) -> None:
        while len(self._cards) < len(states):
            idx = len(self._cards)
            shade = blend_hex(self._base_color, "#000000", 0.06 * (idx % 4))
            card = LevelCard(base_color=shade, on_click=self._on_level_clicked, parent=self)
            self._cards.append(card)

        for i, state in enumerate(states):
            self._cards[i].show()
            self._cards[i].set_state(state)

        for j in range(len(states), len(self._cards)):
            self._cards[j].hide()

        self._relayout_cards()
        self.update()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._relayout_cards()

    def _relayout_cards(self) -> None:
        visible = [c for c in self._cards if c.isVisible()]
        if not visible:
            return
        w = max(1, self.width())
        h = max(1, self.height())

        cols = 4
        rows = (len(visible) + cols - 1) // cols
        card_w = max(140, min(210, int(w * 0.20)))
        card_h = max(140, min(190, int(card_w * 0.9)))
        pad_x = 16
        pad_y = 12
        row_h = max(card_h + 20, (h - 2 * pad_y) // max(1, rows))

        for i, card in enumerate(visible):
            row = i // cols
            col = i % cols
            if row % 2 == 1:
                col = cols - 1 - col
            rx = col / float(cols - 1)
            x = int(pad_x + rx * max(1, (w - card_w - 2 * pad_x)))
            y = int(pad_y + row * row_h + (20 if col % 2 else 0))
            card.setGeometry(x, y, card_w, card_h)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        visible = [c for c in self._cards if c.isVisible()]
        if len(visible) < 2:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        pen = QPen(QColor(120, 130, 150, 90))
        pen.setWidth(6)
        pen.setCapStyle(Qt.RoundCap)
        painter.setPen(pen)

        for a, b in zip(visible, visible[1:]):
            pa = a.geometry().center()
            pb = b.geometry().center()
            start = QPointF(pa.x(), pa.y())
            end = QPointF(pb.x(), pb.y())
            midx = (start.x() + end.x()) / 2.0
            path = QPainterPath(start)
            path.cubicTo(QPointF(midx, start.y()), QPointF(midx, end.y()), end)
            painter.drawPath(path)
