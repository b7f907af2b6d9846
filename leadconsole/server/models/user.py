"""User model for lead assignment and attribution."""

from sqlalchemy import Boolean, Column, Integer, String

from leadconsole.server.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
