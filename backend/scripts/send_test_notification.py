#!/usr/bin/env python3
"""
Send a test notification to a worker (stored, pushed to iOS devices, broadcast on realtime).

  python scripts/send_test_notification.py <worker_id>
  python scripts/send_test_notification.py --email worker@example.com --title "Hola" --type urgent --priority urgent
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.core.constants import NOTIFICATION_PRIORITIES, NOTIFICATION_TYPES
from sad.db.session import SessionLocal
from sad.models.worker import Worker
from sad.models.worker_device import WorkerDevice
from sad.services.notification_service import create_and_send_notification


def main():
    parser = argparse.ArgumentParser(description="Send a test notification")
    parser.add_argument("worker_id", nargs="?")
    parser.add_argument("--email", help="Find the worker by email instead of id")
    parser.add_argument("--title", default="🧪 Notificación de Prueba")
    parser.add_argument("--body", default="Esta es una notificación de prueba")
    parser.add_argument("--type", default="system_message", choices=NOTIFICATION_TYPES)
    parser.add_argument("--priority", default="normal", choices=NOTIFICATION_PRIORITIES)
    args = parser.parse_args()
    if not args.worker_id and not args.email:
        parser.error("worker_id or --email is required")

    db = SessionLocal()
    try:
        q = db.query(Worker)
        worker = (q.filter(Worker.email == args.email.strip().lower()) if args.email else q.filter(Worker.id == args.worker_id)).first()
        if not worker:
            print("Trabajadora no encontrada")
            return 1
        devices = db.query(WorkerDevice).filter(WorkerDevice.worker_id == worker.id).all()
        print(f"Trabajadora: {worker.name} {worker.surname} ({worker.id})")
        print(f"Dispositivos: {len(devices)}")
        for d in devices:
            print(f"  - {d.device_id} {d.platform} token={'sí' if d.push_token else 'no'} authorized={d.authorized}")
        row = create_and_send_notification(
            db,
            worker.id,
            title=args.title,
            body=args.body,
            type=args.type,
            priority=args.priority,
            data={"test": True},
        )
    finally:
        db.close()
    if row is None:
        print("FAIL no se pudo crear la notificación")
        return 1
    print("OK  notificación", row.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
