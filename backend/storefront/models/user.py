import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String

from storefront.db import Base


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class User(Base):
    """Directory entry for a shopper or administrator; credentials live with the identity provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), nullable=False)
    email = Column(String(256), unique=True, index=True, nullable=False)
    role = Column(
        Enum(Role, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.CUSTOMER,
    )
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
