import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftdesk.models.enums import ShiftTiming
from shiftdesk.models.shift_template import ShiftTemplate
from shiftdesk.services.validators import parse_time

logger = logging.getLogger(__name__)

DEFAULT_SHIFT_TEMPLATES = [
    # runs past midnight
    {"name": "evening", "start_hhmm": "22:00", "end_hhmm": "02:00"},
    {"name": "night", "start_hhmm": "02:00", "end_hhmm": "06:00"},
    {"name": "early_morning", "start_hhmm": "06:00", "end_hhmm": "10:00"},
]


def seed_default_templates(db: Session) -> list[ShiftTemplate]:
    """Insert any missing default template. Existing rows are left alone."""
    existing = {t.name for t in db.execute(select(ShiftTemplate)).scalars().all()}
    created = []
    for entry in DEFAULT_SHIFT_TEMPLATES:
        name = ShiftTiming(entry["name"])
        if name in existing:
            continue
        template = ShiftTemplate(
            name=name,
            start_time=parse_time(entry["start_hhmm"], "start_time"),
            end_time=parse_time(entry["end_hhmm"], "end_time"),
        )
        db.add(template)
        created.append(template)

    db.commit()
    for template in created:
        db.refresh(template)
        logger.info("Seeded shift template %s", template.name.value)
    return created
