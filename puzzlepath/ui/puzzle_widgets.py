"""Play-area widgets: balance beam, toggle grid and fraction entry."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from PySide6.QtCore import Qt, QPointF, QRectF
from PySide6.QtGui import QColor, QIntValidator, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from puzzlepath.core.levels import BalanceLayout
from puzzlepath.core.validator import net_torque
from puzzlepath.ui.colors import HomeColors, blend_hex

_MAX_TILT_DEGREES = 15.0


class BeamWidget(QWidget):
    """Beam on a pivot with one tappable spot per position."""

    def __init__(self, on_slot_clicked: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_slot_clicked = on_slot_clicked
        self._layout: Optional[BalanceLayout] = None
        self._selected: Optional[int] = None
        self._highlight: Optional[int] = None
        self.setMinimumSize(420, 220)
        self.setCursor(Qt.PointingHandCursor)

    def set_beam(self, layout: BalanceLayout) -> None:
        self._layout = layout
        self.update()

    def set_selected(self, slot: Optional[int]) -> None:
        self._selected = slot
        self.update()

    def set_highlight(self, slot: Optional[int]) -> None:
        """Ring one slot, e.g. the spot a guided intro asks for."""
        self._highlight = slot
        self.update()

    def _slot_x(self, index: int) -> float:
        count = self._layout.slot_count if self._layout is not None else 1
        margin = 40.0
        if count == 1:
            return self.width() / 2.0
        return margin + index * (self.width() - 2 * margin) / (count - 1)

    def mousePressEvent(self, event) -> None:
        if self._layout is not None:
            x = event.position().x()
            nearest = min(range(self._layout.slot_count), key=lambda i: abs(self._slot_x(i) - x))
            if abs(self._slot_x(nearest) - x) < 30:
                self._on_slot_clicked(nearest)
        super().mousePressEvent(event)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if self._layout is None:
            return
        layout = self._layout
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        cx = self.width() / 2.0
        beam_y = self.height() * 0.55

        # Pivot triangle
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(HomeColors.TEXT_SECONDARY))
        painter.drawPolygon(
            QPolygonF([QPointF(cx, beam_y), QPointF(cx - 26, beam_y + 50), QPointF(cx + 26, beam_y + 50)])
        )

        net = net_torque(layout, self._selected)
        angle = max(-_MAX_TILT_DEGREES, min(_MAX_TILT_DEGREES, net * 4.0))

        painter.save()
        painter.translate(cx, beam_y)
        painter.rotate(angle)
        painter.translate(-cx, -beam_y)

        painter.setBrush(QColor("#92400e"))
        painter.drawRoundedRect(QRectF(20, beam_y - 6, self.width() - 40, 12), 6, 6)

        fixed_by_slot = {f.slot_index: f.weight for f in layout.fixed}
        for i, pos in enumerate(layout.positions):
            x = self._slot_x(i)
            if i == self._highlight:
                painter.setPen(QPen(QColor(HomeColors.STAR), 3))
                painter.setBrush(Qt.NoBrush)
                painter.drawEllipse(QPointF(x, beam_y), 16, 16)
            painter.setPen(Qt.NoPen)
            painter.setBrush(QColor("#fde68a"))
            painter.drawEllipse(QPointF(x, beam_y), 5, 5)
            painter.setPen(QColor(HomeColors.TEXT_MUTED))
            painter.drawText(QRectF(x - 20, beam_y + 10, 40, 18), Qt.AlignCenter, f"{pos:+d}" if pos else "0")

            stack_y = beam_y - 6
            if i in fixed_by_slot:
                stack_y = self._draw_weight(painter, x, stack_y, fixed_by_slot[i], "#64748b")
            if i == self._selected:
                self._draw_weight(painter, x, stack_y, layout.movable_weight, "#3b82f6")
        painter.restore()

        painter.setPen(QColor(HomeColors.TEXT_SECONDARY))
        painter.drawText(QRectF(0, 4, self.width(), 20), Qt.AlignCenter, f"Net torque: {net:+d}")

    @staticmethod
    def _draw_weight(painter: QPainter, x: float, bottom: float, weight: int, color: str) -> float:
        size = 22 + 6 * weight
        rect = QRectF(x - size / 2.0, bottom - size, size, size)
        painter.setPen(QPen(QColor(blend_hex(color, "#000000", 0.3)), 2))
        painter.setBrush(QColor(color))
        painter.drawRoundedRect(rect, 6, 6)
        painter.setPen(QColor("#ffffff"))
        painter.drawText(rect, Qt.AlignCenter, f"{weight}kg")
        return bottom - size - 2


class CellGridWidget(QWidget):
    """Grid of toggleable parts (shape slices, garden squares, smash blocks)."""

    def __init__(
        self,
        on_cell_clicked: Optional[Callable[[int], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._on_cell_clicked = on_cell_clicked
        self._buttons: list[QPushButton] = []
        self._fill_color = HomeColors.PRIMARY
        self._grid = QGridLayout(self)
        self._grid.setSpacing(8)
        self._grid.setContentsMargins(0, 0, 0, 0)

    def set_grid(self, rows: int, cols: int, fill_color: str) -> None:
        self._fill_color = fill_color
        for btn in self._buttons:
            self._grid.removeWidget(btn)
            btn.deleteLater()
        self._buttons = []
        for index in range(rows * cols):
            btn = QPushButton("")
            btn.setMinimumSize(56, 56)
            btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
            btn.setEnabled(self._on_cell_clicked is not None)
            if self._on_cell_clicked is not None:
                btn.clicked.connect(lambda _=False, i=index: self._on_cell_clicked(i))
            self._grid.addWidget(btn, index // cols, index % cols)
            self._buttons.append(btn)

    def set_filled(self, cells: Iterable[int], highlight: Optional[int] = None) -> None:
        filled = set(cells)
        border_on = blend_hex(self._fill_color, "#000000", 0.25)
        for i, btn in enumerate(self._buttons):
            active = i in filled
            border = HomeColors.STAR if i == highlight else (border_on if active else HomeColors.CELL_BORDER)
            btn.setStyleSheet(
                f"""
                QPushButton {{
                    background: {self._fill_color if active else HomeColors.CELL_IDLE};
                    border: {3 if i == highlight else 2}px solid {border};
                    border-radius: 14px;
                }}
                """
            )


class FractionEntryWidget(QWidget):
    """Numerator over denominator, reported on every edit as raw text."""

    def __init__(self, on_changed: Callable[[str, str], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_changed = on_changed

        self.numerator = QLineEdit()
        self.denominator = QLineEdit()
        for edit, placeholder in ((self.numerator, "?"), (self.denominator, "?")):
            edit.setPlaceholderText(placeholder)
            edit.setAlignment(Qt.AlignCenter)
            edit.setMaxLength(3)
            edit.setValidator(QIntValidator(0, 999, edit))
            edit.setFixedSize(90, 56)
            edit.setStyleSheet(
                f"font-size: 26px; font-weight: 900; border: 2px solid {HomeColors.PRIMARY_LIGHT};"
                " border-radius: 12px;"
            )
            edit.textEdited.connect(self._emit)

        bar = QFrame()
        bar.setFixedSize(100, 4)
        bar.setStyleSheet(f"background: {HomeColors.TEXT_PRIMARY}; border-radius: 2px;")

        self._caption = QLabel("Enter the PURPLE fraction")
        self._caption.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout(self)
        layout.setSpacing(6)
        layout.addWidget(self._caption, 0, Qt.AlignHCenter)
        layout.addWidget(self.numerator, 0, Qt.AlignHCenter)
        layout.addWidget(bar, 0, Qt.AlignHCenter)
        layout.addWidget(self.denominator, 0, Qt.AlignHCenter)

    def clear(self) -> None:
        self.numerator.clear()
        self.denominator.clear()

    def set_input_enabled(self, enabled: bool) -> None:
        self.numerator.setEnabled(enabled)
        self.denominator.setEnabled(enabled)

    def _emit(self, _text: str) -> None:
        self._on_changed(self.numerator.text(), self.denominator.text())
