"""
Single source of truth for database tables managed by this backend.

Use these names when writing raw SQL (RLS statements, ID rewrites, TRUNCATE).
`auth_users` mirrors the identity provider's users; its ids are the canonical worker ids.
"""
ALL_TABLE_NAMES = (
    "workers",
    "auth_users",
    "users",
    "assignments",
    "worker_notifications",
    "worker_devices",
    "worker_notification_settings",
    "holidays",
)

# Tables holding a worker_id FK to workers.id. Order matters for ID rewrites:
# children are moved before the old worker row is deleted.
WORKER_REFERENCING_TABLES = (
    "assignments",
    "worker_notifications",
    "worker_devices",
    "worker_notification_settings",
)

# Tables probed by diagnostics (GET /api/diagnose and scripts/diagnose_db.py).
DIAGNOSTIC_TABLE_NAMES = (
    "workers",
    "worker_notifications",
    "worker_devices",
    "worker_notification_settings",
    "assignments",
    "holidays",
)
