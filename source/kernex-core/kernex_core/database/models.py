"""SQLAlchemy ORM models for Kernex persistence.

- SGatewayAccount: gateway login accounts
- SSetting: runtime key/value settings (JSON-encoded values)
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SGatewayAccount(Base):
    """Gateway accounts table.

    ``root_dir`` is stored as entered and confined at login time.
    """

    __tablename__ = "s_gateway_account"

    username = Column(String(128), primary_key=True)
    password_hash = Column(String(128), nullable=False)
    root_dir = Column(String(1024), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index("idx_gateway_account_created", "created_at"),
    )


class SSetting(Base):
    """Runtime settings table."""

    __tablename__ = "s_setting"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)  # JSON
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)
