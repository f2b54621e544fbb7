from __future__ import annotations
from dataclasses import dataclass
from PySide6.QtCore import QObject, Signal, Slot

@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error

class AppState(QObject):
    notification = Signal(object)   # emits Notify

    def __init__(self):
        super().__init__()
        self.config = None
        self.engine = None
        self.engine_ready = False
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))

    def queue_notification(self, message: str, notify_type: str = "info") -> None:
        # for messages raised before the main window exists
        self.queued_notifications.append(Notify(message=message, notify_type=notify_type))

    def drain_notifications(self) -> list[Notify]:
        pending = list(self.queued_notifications)
        self.queued_notifications.clear()
        return pending
