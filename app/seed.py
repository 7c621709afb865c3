import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.enums import Role
from app.models.issue import Issue
from app.models.profile import Profile
from app.services.auth_service import find_profile_by_email
from app.services.issue_workflow import IssueWorkflow

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"

DEMO_PROFILES = [
    ("citizen@example.com", "Demo Citizen", Role.CITIZEN),
    ("authority@example.com", "Demo Authority", Role.AUTHORITY),
    ("admin@example.com", "Demo Admin", Role.ADMIN),
]

DEMO_ISSUES = [
    ("Pothole on Main St", "Large pothole in the left lane", "Roads", "Main St & 3rd Ave"),
    ("Overflowing garbage bin", "Bin has not been emptied for a week", "Garbage", "Central Park gate"),
    ("Streetlight out", "Light flickers and goes dark after 10pm", "Electricity", "Elm St 42"),
]


def _ensure_profile(db: Session, email: str, name: str, role: Role) -> Profile:
    p = find_profile_by_email(db, email)
    if p:
        return p
    p = Profile(email=email, name=name, role=role.value, password_hash=hash_password(DEMO_PASSWORD))
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def seed():
    configure_logging(get_settings())
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    try:
        profiles = {role: _ensure_profile(db, email, name, role) for email, name, role in DEMO_PROFILES}

        citizen = profiles[Role.CITIZEN]
        already = db.execute(
            select(func.count()).select_from(Issue).where(Issue.user_id == citizen.id)
        ).scalar_one()
        if already:
            logger.info("[seed] demo issues already present; skipping")
            return

        wf = IssueWorkflow()
        for title, description, category, location in DEMO_ISSUES:
            wf.create_issue(
                db,
                reporter_id=citizen.id,
                title=title,
                description=description,
                category=category,
                location=location,
            )

        logger.info("[seed] %d profiles, %d issues (password: %s)", len(profiles), len(DEMO_ISSUES), DEMO_PASSWORD)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
