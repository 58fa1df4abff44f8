"""Reset/seed feature: transactional clear and bulk load with enforcement suspended."""

from fixtureforge.features.reset.backends import (
    CONSTRAINT_TOGGLES,
    ConstraintToggle,
    PostgreSQLConstraintToggle,
    SQLiteConstraintToggle,
    SqlServerConstraintToggle,
    get_constraint_toggle,
)
from fixtureforge.features.reset.service import FixtureEngine

__all__ = [
    "CONSTRAINT_TOGGLES",
    "ConstraintToggle",
    "FixtureEngine",
    "PostgreSQLConstraintToggle",
    "SQLiteConstraintToggle",
    "SqlServerConstraintToggle",
    "get_constraint_toggle",
]
