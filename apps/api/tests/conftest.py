import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from collections.abc import Generator  # noqa: E402
from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from shiftdesk.core.database import Base, get_db  # noqa: E402
from shiftdesk.core.security import Actor, create_access_token, normalize_roles  # noqa: E402
from shiftdesk.main import app  # noqa: E402
from shiftdesk.models.enums import ShiftTiming  # noqa: E402
from shiftdesk.models.shift import Shift  # noqa: F401,E402
from shiftdesk.models.shift_template import ShiftTemplate  # noqa: E402
from shiftdesk.models.staff import StaffMember  # noqa: E402
from shiftdesk.models.time_off import TimeOffRequest  # noqa: F401,E402
from shiftdesk.scheduling.shift_templates import seed_default_templates  # noqa: E402
from shiftdesk.services import shifts as shift_service  # noqa: E402


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def templates(db: Session) -> dict:
    """The default catalog keyed by slot name."""
    seed_default_templates(db)
    return {t.name.value: t for t in shift_service.list_templates(db)}


@pytest.fixture
def make_staff(db: Session):
    counter = {"n": 0}

    def _make(first_name="Sam", last_name=None, roles=("staff",), worker_roles=("server",)) -> StaffMember:
        counter["n"] += 1
        n = counter["n"]
        member = StaffMember(
            first_name=first_name,
            last_name=last_name or f"Tester{n}",
            email=f"staff{n}@example.com",
            roles=list(roles),
            worker_roles=list(worker_roles) if worker_roles is not None else None,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _make


@pytest.fixture
def manager(make_staff) -> StaffMember:
    return make_staff(first_name="Morgan", last_name="Manager", roles=("manager",), worker_roles=())


@pytest.fixture
def manager_actor(manager) -> Actor:
    return actor_for(manager)


@pytest.fixture
def make_shift(db: Session, manager_actor: Actor, templates: dict):
    def _make(shift_date=date(2025, 10, 10), slot="evening", requirements=None) -> Shift:
        if requirements is None:
            requirements = [{"role_name": "server", "required_count": 1}]
        return shift_service.create_shift(
            db, manager_actor, shift_date, templates[slot].template_id, requirements=requirements
        )

    return _make


@pytest.fixture
def overlapping_templates(db: Session) -> tuple[ShiftTemplate, ShiftTemplate]:
    """Two overnight templates that overlap: 22:00-02:00 and 23:00-03:00. Not combinable with `templates`."""
    evening = ShiftTemplate(name=ShiftTiming.evening, start_time=time(22, 0), end_time=time(2, 0))
    late = ShiftTemplate(name=ShiftTiming.night, start_time=time(23, 0), end_time=time(3, 0))
    db.add_all([evening, late])
    db.commit()
    return evening, late


@pytest.fixture
def overlapping_shifts(db: Session, manager_actor: Actor, overlapping_templates) -> tuple[Shift, Shift]:
    """Shifts on 2025-10-10 for both overlapping templates, two server slots each."""
    evening, late = overlapping_templates
    reqs = [{"role_name": "server", "required_count": 2}]
    return (
        shift_service.create_shift(db, manager_actor, date(2025, 10, 10), evening.template_id, reqs),
        shift_service.create_shift(db, manager_actor, date(2025, 10, 10), late.template_id, reqs),
    )


def actor_for(member: StaffMember) -> Actor:
    return Actor(user_id=member.staff_id, roles=normalize_roles(member.roles))


def auth_headers(member: StaffMember) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(member.staff_id, member.roles)}"}


def requirement_id(shift: Shift, role_name: str = "server") -> int:
    return next(r.requirement_id for r in shift.requirements if r.role_name == role_name)
