"""PlatformUser model: owners and agents who list properties on the public site."""

from typing import Optional

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import PlatformUserRole
from bigha.models.mixins import TimestampMixin


class PlatformUser(Base, TimestampMixin):
    __tablename__ = "platform_users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    role: Mapped[PlatformUserRole] = mapped_column(
        Enum(PlatformUserRole, name="platform_user_role_enum"),
        nullable=False,
        default=PlatformUserRole.USER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
