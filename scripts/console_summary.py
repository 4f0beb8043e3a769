"""
Log in to a running helpdesk API and print what the console would load.

Usage:
    python scripts/console_summary.py --email truong.minh.f@example.com --password password
    python scripts/console_summary.py --fixtures --start 2025-04-07 --end 2025-04-13

With --fixtures the static seed data is used and no server is needed.
"""
import argparse
import os
import sys
from datetime import date, timedelta

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from helpdesk.config import settings  # noqa: E402
from helpdesk.errors import GatewayError  # noqa: E402
from helpdesk.logging import setup_logging  # noqa: E402
from helpdesk.services.api_client import ApiClient  # noqa: E402
from helpdesk.store.app_store import AppStore  # noqa: E402
from helpdesk.store.data_sources import FixtureDataSource, RemoteDataSource  # noqa: E402
from helpdesk.store.snapshot import COLLECTIONS  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Print collection counts and a timesheet summary")
    parser.add_argument("--email", default="truong.minh.f@example.com")
    parser.add_argument("--password", default=settings.seed_password)
    parser.add_argument("--base-url", default=settings.api_base_url, help="API base URL (default from API_BASE_URL)")
    parser.add_argument("--fixtures", action="store_true", help="Use the built-in seed data instead of the API")
    parser.add_argument("--period", choices=["week", "month"], default="week")
    parser.add_argument("--start", type=date.fromisoformat, help="Summary start date (default: 6 days before --end)")
    parser.add_argument("--end", type=date.fromisoformat, default=date.today())
    args = parser.parse_args()

    setup_logging()
    client = None
    if args.fixtures:
        source = FixtureDataSource()
    else:
        client = ApiClient(base_url=args.base_url)
        source = RemoteDataSource(client)

    store = AppStore(source)
    try:
        result = store.login(args.email, args.password)
        if not result.ok:
            print(f"Login refused: {result.reason}")
            return 1
        user = store.current_user
        print("=" * 60)
        print(f"Signed in as {user.name} <{user.email}> ({user.role})")
        print("=" * 60)
        for name in COLLECTIONS:
            print(f"{name:<22} {len(getattr(store, name)):>5}")
        print(f"{'unread notifications':<22} {store.unread_notifications_count:>5}")

        start = args.start or args.end - timedelta(days=6)
        summary = store.get_timesheet_summary(user.id, args.period, start, args.end)
        print("-" * 60)
        print(f"Timesheet {summary.start_date} .. {summary.end_date} ({summary.period})")
        print(f"  regular hours          {summary.regular_hours}")
        print(f"  overtime hours         {summary.overtime_hours} (weekend {summary.weekend_overtime_hours})")
        print(f"  leave days             {summary.leave_count}")
        print(f"  completion rate        {summary.completion_rate}%")
        return 0
    except GatewayError as e:
        print(f"API error: {e}")
        return 2
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
