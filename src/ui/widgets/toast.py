# ui/widgets/toast.py
from __future__ import annotations

from PySide6.QtCore import Qt, QTimer, QPoint, QPropertyAnimation, QEasingCurve
from PySide6.QtWidgets import QWidget, QFrame, QLabel, QHBoxLayout, QGraphicsOpacityEffect

# kind -> (background, border)
_KINDS = {
    "info": ("#0b1222", "#38bdf8"),
    "success": ("#052e1a", "#16a34a"),
    "warning": ("#2a1a05", "#f59e0b"),
    "error": ("#2a0a0a", "#ef4444"),
}


def normalize_kind(kind: str | None) -> str:
    kind = (kind or "info").lower()
    if kind == "warn":
        return "warning"
    return kind if kind in _KINDS else "info"


class ToastWidget(QFrame):
    def __init__(self, message: str, kind: str, parent: QWidget):
        super().__init__(parent)
        self.kind = normalize_kind(kind)
        bg, border = _KINDS[self.kind]

        self.setObjectName("Toast")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
        QFrame#Toast {{
            background: {bg};
            border: 1px solid {border};
            border-radius: 12px;
        }}
        QLabel {{ color: #e5e7eb; font-size: 12px; }}
        """)

        self.lbl = QLabel(message)
        self.lbl.setWordWrap(True)
        row = QHBoxLayout(self)
        row.setContentsMargins(12, 8, 12, 8)
        row.addWidget(self.lbl)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(1.0)
        self.setGraphicsEffect(self._opacity)
        self._fade: QPropertyAnimation | None = None

    def mousePressEvent(self, event):
        # click to dismiss
        self.parent().dismiss(self)  # type: ignore[attr-defined]

    def fade_out(self, on_done):
        self._fade = QPropertyAnimation(self._opacity, b"opacity", self)
        self._fade.setDuration(160)
        self._fade.setStartValue(self._opacity.opacity())
        self._fade.setEndValue(0.0)
        self._fade.setEasingCurve(QEasingCurve.Type.InCubic)
        self._fade.finished.connect(on_done)
        self._fade.start()


class ToastManager(QWidget):
    """
    Transparent overlay over the host window. Toasts stack from the bottom
    edge upwards, newest at the bottom, and dismiss themselves after a timeout.
    """

    def __init__(self, host: QWidget, max_visible: int = 4):
        super().__init__(host)
        self.host = host
        self.max_visible = max_visible
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, False)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self._toasts: list[ToastWidget] = []
        self._margin = 12
        self._spacing = 8
        self.setGeometry(host.rect())
        self.hide()

    @property
    def toasts(self) -> list[ToastWidget]:
        return list(self._toasts)

    def show_toast(self, message: str, notify_type: str = "info", timeout_ms: int = 3000) -> ToastWidget:
        toast = ToastWidget(message, notify_type, parent=self)
        toast.setFixedWidth(min(380, max(220, self.host.width() - 2 * self._margin)))
        self._toasts.append(toast)

        while len(self._toasts) > self.max_visible:
            self._remove(self._toasts[0])

        self.relayout()
        toast.show()
        # owned by the toast so it dies with it
        timer = QTimer(toast)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self.dismiss(toast))
        timer.start(max(500, int(timeout_ms)))
        return toast

    def dismiss(self, toast: ToastWidget) -> None:
        if toast not in self._toasts:
            return
        toast.fade_out(lambda: self._remove(toast))

    def _remove(self, toast: ToastWidget) -> None:
        if toast in self._toasts:
            self._toasts.remove(toast)
            toast.hide()
            toast.deleteLater()
            self.relayout()

    def relayout(self):
        self.setGeometry(self.host.rect())
        if not self._toasts:
            self.hide()
            return

        y = self.height() - self._margin
        for t in reversed(self._toasts):
            t.adjustSize()
            h = t.sizeHint().height()
            y -= h
            t.move(QPoint((self.width() - t.width()) // 2, y))
            y -= self._spacing

        # shrink to the stack so the rest of the window keeps its clicks
        top = max(0, y)
        self.setGeometry(0, top, self.host.width(), self.host.height() - top)
        offset = top
        for t in self._toasts:
            t.move(t.pos() - QPoint(0, offset))
        self.show()
        self.raise_()
