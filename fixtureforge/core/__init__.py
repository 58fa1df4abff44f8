"""Core infrastructure: config, database, logging, exceptions."""

from fixtureforge.core.config import Settings, get_settings
from fixtureforge.core.database import Base, create_db_engine, session_scope
from fixtureforge.core.logging import bind_scenario, get_logger, scenario_key_ctx

__all__ = [
    "Base",
    "Settings",
    "bind_scenario",
    "create_db_engine",
    "get_logger",
    "get_settings",
    "scenario_key_ctx",
    "session_scope",
]
