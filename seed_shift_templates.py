#!/usr/bin/env python3
"""
Script to create the default shift templates (evening, night, early_morning).
Run this after the database migration has been completed.

Usage:
    python seed_shift_templates.py
"""

import sys
from pathlib import Path

# Add the apps/api directory to the path so we can import from shiftdesk
api_dir = Path(__file__).parent / "apps" / "api"
sys.path.insert(0, str(api_dir))

from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from shiftdesk.core.database import SessionLocal  # noqa: E402
from shiftdesk.scheduling.shift_templates import seed_default_templates  # noqa: E402


def main() -> int:
    db = SessionLocal()
    try:
        created = seed_default_templates(db)
        if not created:
            print("All default shift templates already exist.")
        for t in created:
            print(f"Created template {t.name.value}: {t.start_time} - {t.end_time} (id {t.template_id})")
        return 0
    except SQLAlchemyError as e:
        db.rollback()
        print(f"Error seeding shift templates: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
