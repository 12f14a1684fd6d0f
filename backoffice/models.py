"""
Back Office Rules Engine - Database Models

SQLAlchemy ORM models for the rows the matching and scoring scripts
read and write.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# Enums
class ClientType(PyEnum):
    INDIVIDUAL = "pf"      # Pessoa fisica, identified by CPF
    ORGANIZATION = "pj"    # Pessoa juridica, identified by CNPJ


class InfluencerStage(PyEnum):
    IDENTIFIED = "identified"
    RESEARCHING = "researching"
    CONTACTED = "contacted"
    NEGOTIATING = "negotiating"
    CONTRACTED = "contracted"
    ACTIVE = "active"
    PAUSED = "paused"
    LOST = "lost"


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Client(Base):
    """
    Brokerage client. Imports are resolved against this table by account
    number, CPF, CNPJ and finally name.
    """

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    client_type: Mapped[ClientType] = mapped_column(
        Enum(ClientType), nullable=False, default=ClientType.INDIVIDUAL
    )

    # Identifiers (stored as typed, normalized at match time)
    account_number: Mapped[Optional[str]] = mapped_column(String(30), index=True)
    cpf: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    cnpj: Mapped[Optional[str]] = mapped_column(String(25), index=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    assessor_id: Mapped[Optional[str]] = mapped_column(String(36))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    account_mappings: Mapped[list["ClientAccountMapping"]] = relationship(
        back_populates="client", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name}, active={self.active})>"


class ClientAccountMapping(Base):
    """
    Account numbers that belonged to clients merged into another client.
    Consulted when an import row no longer matches any client directly.
    """

    __tablename__ = "client_account_mappings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id"), nullable=False, index=True
    )
    account_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    original_client_name: Mapped[Optional[str]] = mapped_column(Text)
    merged_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )

    client: Mapped["Client"] = relationship(back_populates="account_mappings")

    def __repr__(self) -> str:
        return f"<ClientAccountMapping(account={self.account_number}, client_id={self.client_id})>"


class InfluencerProfile(Base):
    """
    Influencer prospect. qualification_score is recomputed whenever a
    scoring field changes and stored here by the caller.
    """

    __tablename__ = "influencer_profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    stage: Mapped[InfluencerStage] = mapped_column(
        Enum(InfluencerStage), nullable=False, default=InfluencerStage.IDENTIFIED, index=True
    )

    # Social reach
    instagram_handle: Mapped[Optional[str]] = mapped_column(String(100))
    instagram_followers: Mapped[Optional[int]] = mapped_column(Integer)
    youtube_channel: Mapped[Optional[str]] = mapped_column(String(200))
    youtube_subscribers: Mapped[Optional[int]] = mapped_column(Integer)
    twitter_handle: Mapped[Optional[str]] = mapped_column(String(100))
    twitter_followers: Mapped[Optional[int]] = mapped_column(Integer)
    tiktok_handle: Mapped[Optional[str]] = mapped_column(String(100))
    tiktok_followers: Mapped[Optional[int]] = mapped_column(Integer)

    # Profile
    niche: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    engagement_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))

    # Qualification
    qualification_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    estimated_cpl: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_influencer_stage_score", "stage", "qualification_score"),
    )

    def __repr__(self) -> str:
        return f"<InfluencerProfile(id={self.id}, name={self.name}, score={self.qualification_score})>"
