"""
Centralized constants for notifications and scheduler jobs.

Change sounds, vibration patterns or job intervals here instead of scattering literals across services and routes.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
NOTIFICATION_CLEANUP_JOB_ID = "notification_cleanup"
NOTIFICATION_CLEANUP_INTERVAL_HOURS = 1

NOTIFICATION_TYPES = (
    "new_user",
    "user_removed",
    "schedule_change",
    "assignment_change",
    "route_update",
    "system_message",
    "reminder",
    "urgent",
    "holiday_update",
    "service_start",
    "service_end",
)
NOTIFICATION_PRIORITIES = ("low", "normal", "high", "urgent")

DEFAULT_NOTIFICATION_SOUND = "notification-default_new.wav"
NOTIFICATION_SOUNDS = {
    "new_user": "notification-user_added_new.wav",
    "user_removed": "notification-user_removed_new.wav",
    "schedule_change": "notification-schedule_changed_new.wav",
    "assignment_change": "notification-assignment_changed_new.wav",
    "route_update": "notification-route_update_new.wav",
    "system_message": "notification-system_new.wav",
    "reminder": "notification-reminder_new.wav",
    "urgent": "notification-urgent_new.wav",
    "holiday_update": "notification-holiday_update_new.wav",
    "service_start": "notification-service_start_new.wav",
    "service_end": "notification-service_end_new.wav",
}

VIBRATION_PATTERNS = {
    "low": [100],
    "normal": [200, 100, 200],
    "high": [300, 100, 300, 100, 300],
    "urgent": [500, 200, 500, 200, 500, 200, 500],
}

# Settings column that switches push delivery for each notification type
NOTIFICATION_CATEGORY_SETTING = {
    "new_user": "new_user_notifications",
    "user_removed": "new_user_notifications",
    "schedule_change": "schedule_change_notifications",
    "assignment_change": "assignment_change_notifications",
    "route_update": "route_update_notifications",
    "system_message": "system_notifications",
    "reminder": "reminder_notifications",
    "urgent": "urgent_notifications",
    "holiday_update": "holiday_update_notifications",
    "service_start": "reminder_notifications",
    "service_end": "reminder_notifications",
}

NOTIFICATION_ICON = "/favicon.ico"

# Realtime broadcast channel / event the worker dashboard subscribes to
REALTIME_CHANNEL_TEMPLATE = "worker-{worker_id}-notifications"
REALTIME_EVENT = "notification"

# Assignment statuses that mean the worker no longer serves the user
REMOVED_ASSIGNMENT_STATUSES = ("cancelled", "inactive")

MIN_PASSWORD_LENGTH = 6
