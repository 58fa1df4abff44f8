"""Identity scenarios: sandbox, roles, users and an admin user.

Generate their snapshot files with:

    python scripts/generate_scenarios.py --scenarios examples.identity.scenarios \
        --catalog examples/identity/catalog.yaml --output-dir ./scenarios
"""

import datetime

from sqlalchemy.orm import Session

from examples.identity.domain import IdentityUnitOfWork
from fixtureforge.features.scenarios import Scenario


class ScenarioIds:
    """Identifiers shared by scenarios and the tests that load them."""

    ADMIN_ROLE_ID = "r1"
    ADMIN_ROLE_NAME = "Admin"
    USER_IDS = ("u1", "u2", "u3", "u4", "u5")
    ADMIN_USER_EMAIL = "u1@example.com"

    # Fixed so generated files are byte-identical across runs
    CREATED_AT = datetime.datetime(2024, 1, 1, 9, 0, 0)


def build_context(session: Session) -> IdentityUnitOfWork:
    """Wrap the generator's session in the identity unit of work."""
    return IdentityUnitOfWork(session)


class CreateSandBox(Scenario):
    """Empty database."""

    key = "CreateSandBox"

    def populate(self, context: IdentityUnitOfWork) -> None:
        pass


class CreateRoles(Scenario):
    key = "CreateRoles"

    def populate(self, context: IdentityUnitOfWork) -> None:
        context.roles.create(ScenarioIds.ADMIN_ROLE_ID, ScenarioIds.ADMIN_ROLE_NAME)


class CreateUsers(Scenario):
    """Five active users on top of the roles."""

    key = "CreateUsers"
    parent = CreateRoles

    def populate(self, context: IdentityUnitOfWork) -> None:
        for number, user_id in enumerate(ScenarioIds.USER_IDS, start=1):
            context.users.create(
                user_id=user_id,
                email=f"{user_id}@example.com",
                display_name=f"User {number}",
                created_at=ScenarioIds.CREATED_AT,
            )


class CreateAdminUser(Scenario):
    """Grants the Admin role to the first user."""

    key = "CreateAdminUser"
    parent = CreateUsers

    def populate(self, context: IdentityUnitOfWork) -> None:
        admin = self.require(
            context.roles.get_by_name(ScenarioIds.ADMIN_ROLE_NAME),
            f"role '{ScenarioIds.ADMIN_ROLE_NAME}'",
        )
        user = self.require(
            context.users.get_by_email(ScenarioIds.ADMIN_USER_EMAIL),
            f"user '{ScenarioIds.ADMIN_USER_EMAIL}'",
        )
        context.user_roles.assign(user, admin)


SCENARIOS = [CreateSandBox, CreateRoles, CreateUsers, CreateAdminUser]
