"""Non-blocking toast for status and error notices."""

from __future__ import annotations

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QLabel = object  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore

_INFO_STYLE = (
    "color: white; font-size: 15px; padding: 12px;"
    "background: rgba(0,0,0,190); border-radius: 10px;"
)
_ERROR_STYLE = (
    "color: #FF6B6B; font-size: 15px; padding: 12px;"
    "background: rgba(0,0,0,210); border-radius: 10px;"
)


class NoticeToast(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__(parent)
        self.setWindowFlags(Qt.ToolTip | Qt.FramelessWindowHint)
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WA_ShowWithoutActivating, True)

        self._label = QLabel("")
        self._label.setWordWrap(True)
        self._label.setStyleSheet(_INFO_STYLE)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._label)
        self.setLayout(layout)

        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.timeout.connect(self.hide)

    def show_info(self, text: str, hide_after_ms: int = 2000) -> None:
        self._show(text, _INFO_STYLE, hide_after_ms)

    def show_error(self, text: str, hide_after_ms: int = 3000) -> None:
        self._show(f"⚠️ {text}", _ERROR_STYLE, hide_after_ms)

    def _show(self, text: str, style: str, hide_after_ms: int) -> None:
        self._hide_timer.stop()
        self._label.setStyleSheet(style)
        self._label.setText(text)
        self.adjustSize()
        self._place_bottom_center()
        self.show()
        self._hide_timer.start(hide_after_ms)

    def _place_bottom_center(self) -> None:
        anchor = self.parentWidget()
        if anchor is None:
            return
        geom = anchor.geometry()
        x = geom.x() + (geom.width() - self.width()) // 2
        y = geom.y() + geom.height() - self.height() - 40
        self.move(x, y)
