"""Example identity domain: roles, users and role assignments.

A small ORM model with repositories and a unit of work, standing in for the
application code that scenarios call to create data.
"""

import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from fixtureforge.core.database import Base


class Role(Base):
    """Role that can be granted to users.

    Attributes:
        id: Opaque string identifier.
        name: Unique role name (e.g., "Admin").
    """

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True)


class User(Base):
    """Application user.

    Attributes:
        id: Opaque string identifier.
        email: Unique login email.
        display_name: Name shown in the UI.
        is_active: Whether the user can sign in.
        created_at: Creation time, set explicitly so fixtures stay deterministic.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime)


class UserRole(Base):
    """Assignment of a role to a user."""

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), primary_key=True)
    role_id: Mapped[str] = mapped_column(ForeignKey("roles.id"), primary_key=True)


# ============================================================================
# REPOSITORIES
# ============================================================================


class RoleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_name(self, name: str) -> Role | None:
        return self.session.scalar(select(Role).where(Role.name == name))

    def create(self, role_id: str, name: str) -> Role:
        role = Role(id=role_id, name=name)
        self.session.add(role)
        self.session.flush()
        return role


class UserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email))

    def list_all(self) -> list[User]:
        return list(self.session.scalars(select(User).order_by(User.id)))

    def create(
        self,
        user_id: str,
        email: str,
        display_name: str,
        created_at: datetime.datetime,
        is_active: bool = True,
    ) -> User:
        user = User(
            id=user_id,
            email=email,
            display_name=display_name,
            created_at=created_at,
            is_active=is_active,
        )
        self.session.add(user)
        self.session.flush()
        return user


class UserRoleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def assign(self, user: User, role: Role) -> UserRole:
        link = UserRole(user_id=user.id, role_id=role.id)
        self.session.add(link)
        self.session.flush()
        return link

    def roles_of(self, user: User) -> list[str]:
        stmt = (
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user.id)
            .order_by(Role.name)
        )
        return list(self.session.scalars(stmt))


class IdentityUnitOfWork:
    """Repositories sharing one session; the caller owns commit/rollback."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.roles = RoleRepository(session)
        self.users = UserRepository(session)
        self.user_roles = UserRoleRepository(session)
