from stake_hub.notify.queue import Notification, NotificationQueue

__all__ = ["Notification", "NotificationQueue"]
