from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.ogs_presence.ogs_presence.container import build_container
from src.ogs_presence.ogs_presence.main import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Close attendance rows and work sessions left open past their day.")
    parser.add_argument("--preview", action="store_true", help="only show what the attendance cleanup would close")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if args.preview:
        preview = container.reconciler.preview_attendance_cleanup()
        print(f"open attendance records before today: {preview.total_records}")
        for day, count in preview.records_by_date.items():
            print(f"  {day.isoformat()}: {count}")
        return 0

    failed = False
    for name, result in container.reconciler.run_all().items():
        print(f"{name}: closed={result.records_closed} affected={result.actors_affected} errors={len(result.errors)}")
        for err in result.errors:
            print(f"  ! {err}")
        failed = failed or not result.success
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
