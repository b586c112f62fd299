from __future__ import annotations

import argparse

from sqlmodel import Session

from notification_store.core.config import settings
from notification_store.core.logging import configure_logging
from notification_store.db.session import engine
from notification_store.schemas.refs import Ref
from notification_store.services.notification_service import NotificationStore, StoreConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Open all unopened notifications of a target.")
    parser.add_argument('target_type', help='Target type, e.g. User')
    parser.add_argument('target_id', help='Target id')
    parser.add_argument('--key', default=None, help='Only open notifications with this key')
    parser.add_argument('--dry-run', action='store_true', help='Count only, do not write to DB')
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    with Session(engine) as session:
        store = NotificationStore(session, StoreConfig.from_settings(settings))
        query = store.for_target(Ref(type=args.target_type, id=args.target_id)).unopened_only()
        if args.key:
            query = query.filtered_by_key(args.key)
        if args.dry_run:
            print(f"would open {query.count()} notifications")
            return
        opened = store.open_all(query)
    print(f"opened notifications: {opened}")


if __name__ == '__main__':
    main()
