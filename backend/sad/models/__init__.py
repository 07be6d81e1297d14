from sad.models.assignment import Assignment
from sad.models.auth_user import AuthUser
from sad.models.holiday import Holiday
from sad.models.service_user import ServiceUser
from sad.models.worker import Worker
from sad.models.worker_device import WorkerDevice
from sad.models.worker_notification import WorkerNotification
from sad.models.worker_notification_settings import WorkerNotificationSettings

__all__ = [
    "Assignment",
    "AuthUser",
    "Holiday",
    "ServiceUser",
    "Worker",
    "WorkerDevice",
    "WorkerNotification",
    "WorkerNotificationSettings",
]
