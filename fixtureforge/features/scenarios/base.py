"""Scenario contract: a named, composable unit of database seeding logic."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, TypeVar

from fixtureforge.core.exceptions import MissingPrerequisiteError, ScenarioGraphError

T = TypeVar("T")

# Keys name snapshot files, so they must be safe as a file stem
KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


class Scenario(ABC):
    """Base class for fixture scenarios.

    Subclasses declare a unique ``key`` (the snapshot file stem) and an
    optional ``parent`` scenario whose snapshot is seeded before
    ``populate`` runs. Scenarios are stateless; the generator creates one
    instance per run and never shares state between them.

    Example:
        class CreateUsers(Scenario):
            key = "CreateUsers"
            parent = CreateRoles

            def populate(self, context):
                admin = self.require(context.roles.get_by_name("Admin"), "role 'Admin'")
                context.users.create("u1@example.com", "User One")
    """

    key: ClassVar[str]
    parent: ClassVar[type[Scenario] | None] = None

    @abstractmethod
    def populate(self, context: Any) -> None:
        """Write this scenario's data through the injected domain context.

        Runs inside one transaction owned by the context factory. Values must be
        deterministic: no wall-clock timestamps or random identifiers.
        """

    def require(self, value: T | None, description: str) -> T:
        """Return value, or fail loudly when inherited data is missing.

        Args:
            value: Result of a lookup for data the parent scenario should provide.
            description: What was looked up, for the error message.

        Raises:
            MissingPrerequisiteError: If value is None.
        """
        if value is None:
            parent_key = self.parent.key if self.parent is not None else None
            raise MissingPrerequisiteError(
                f"Scenario '{self.key}' requires {description}, "
                f"which was not found in parent scenario '{parent_key}'",
                details={"scenario_key": self.key, "parent_key": parent_key, "missing": description},
            )
        return value

    @classmethod
    def ancestors(cls) -> list[type[Scenario]]:
        """Parent chain from the immediate parent up to the root.

        Raises:
            ScenarioGraphError: If the chain loops back on itself.
        """
        chain: list[type[Scenario]] = []
        seen: set[type[Scenario]] = {cls}
        current = cls.parent
        while current is not None:
            if current in seen:
                raise ScenarioGraphError(
                    f"Scenario '{cls.key}' has a cyclic parent chain",
                    details={"scenario_key": cls.key, "chain": [s.key for s in chain]},
                )
            chain.append(current)
            seen.add(current)
            current = current.parent
        return chain

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key!r}>"
