"""
SQLAlchemy ORM models.

Column names follow the JSON field names of the ``/usuarios`` API.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "usuarios"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    nome = Column(String(100), nullable=False, index=True)
    # Unique at the store level so two concurrent registrations that both
    # pass the lookup cannot both insert.
    email = Column(String(255), unique=True, nullable=False)
    senha = Column(String(255), nullable=False)
    ativo = Column(Boolean, nullable=False, default=True)
    tipo = Column(String(16), nullable=False, default="Client")
    avatar = Column(String(2048))


# Every column except the password hash, in projection order.
PUBLIC_COLUMNS = (User.id, User.nome, User.email, User.ativo, User.tipo, User.avatar)
