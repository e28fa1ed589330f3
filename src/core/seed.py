"""Baseline data for a freshly provisioned User service database.

Safe to run on every cold start: each record is looked up before it is
inserted, so a second run writes nothing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .auth import hash_password
from .db import Database
from .exceptions import SeedError
from .logging_config import get_logger
from .models import Role, RoleName, User

LOGGER = get_logger(__name__)

BASELINE_ROLES = {
    RoleName.ADMIN.value: "Full administrative access",
    RoleName.USER.value: "Standard account",
}


@dataclass
class SeedReport:
    """What a seeding run inserted."""

    roles_created: List[str] = field(default_factory=list)
    admin_created: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.roles_created) or self.admin_created


class SeedDataService:
    """Seeding collaborator for the User service."""

    def __init__(
        self,
        database: Database,
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
    ) -> None:
        self.database = database
        self.admin_email = admin_email
        self.admin_password = admin_password

    def seed_if_empty(self) -> SeedReport:
        """
        Insert baseline roles and the admin account when they are missing.

        Raises:
            DatabaseConnectionError: The database could not be reached or the
                link dropped mid-run.
            SeedError: Baseline data could not be written.
        """
        report = SeedReport()

        try:
            with self.database.session() as session:
                existing = set(session.scalars(select(Role.name)).all())
                for name, description in BASELINE_ROLES.items():
                    if name not in existing:
                        session.add(Role(name=name, description=description))
                        report.roles_created.append(name)
                session.flush()

                if self.admin_email and self.admin_password:
                    report.admin_created = self._seed_admin(session)
        except SQLAlchemyError as exc:
            raise SeedError(f"Seeding failed: {exc}") from exc

        if report.changed:
            LOGGER.info(
                "Seed data inserted",
                extra={"extra_data": {
                    "roles_created": report.roles_created,
                    "admin_created": report.admin_created,
                }},
            )
        else:
            LOGGER.info("Seed data already present - nothing to do")
        return report

    def _seed_admin(self, session) -> bool:
        email = self.admin_email.strip().lower()
        if session.scalar(select(User.id).where(User.email == email)) is not None:
            return False

        admin_role = session.scalar(select(Role).where(Role.name == RoleName.ADMIN.value))
        session.add(User(
            email=email,
            display_name="Administrator",
            hashed_password=hash_password(self.admin_password),
            role=admin_role,
        ))
        return True


__all__ = ["BASELINE_ROLES", "SeedReport", "SeedDataService"]
