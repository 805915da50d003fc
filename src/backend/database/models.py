"""
SQLAlchemy models for the Gita content database.

Maps the hosted schema consumed by the problem search pipeline. Columns the
pipeline never reads (translations, audio, publishing workflow) are left out.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Float, Index
)
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.dialects.postgresql import UUID
import uuid


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Chapter(Base):
    """One of the eighteen chapters of the Bhagavad Gita."""
    __tablename__ = "chapters"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chapter_number = Column(Integer, nullable=False, unique=True)
    title_english = Column(String(500), nullable=False)
    theme = Column(String(500), nullable=False)
    verse_count = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=True)

    # Relationships
    shloks = relationship("Shlok", back_populates="chapter")


class Shlok(Base):
    """
    A single verse.

    Owned by the content-management side; read-only for the search pipeline.
    """
    __tablename__ = "shloks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chapter_id = Column(UUID(as_uuid=True), ForeignKey("chapters.id"), nullable=False)

    verse_number = Column(Integer, nullable=False)
    sanskrit_text = Column(Text, nullable=False)
    english_meaning = Column(Text, nullable=False)
    life_application = Column(Text, nullable=True)
    status = Column(String(50), nullable=True)  # draft, scheduled, published

    created_at = Column(DateTime, default=datetime.utcnow, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    # Relationships
    chapter = relationship("Chapter", back_populates="shloks")
    problem_links = relationship("ShlokProblem", back_populates="shlok", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_shloks_chapter_id', 'chapter_id'),
    )


class Problem(Base):
    """
    A named life-difficulty category (anxiety, fear, anger, ...).

    Slug is unique and must not change once verses are linked to it.
    """
    __tablename__ = "problems"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    category = Column(String(100), nullable=True)
    description_english = Column(Text, nullable=True)
    icon = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)
    display_order = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=True)

    # Relationships
    shlok_links = relationship("ShlokProblem", back_populates="problem")

    __table_args__ = (
        Index('ix_problems_display_order', 'display_order'),
    )


class ShlokProblem(Base):
    """
    Weighted link between a verse and a problem category.

    relevance_score is only used for ordering; it has no fixed range.
    """
    __tablename__ = "shlok_problems"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shlok_id = Column(UUID(as_uuid=True), ForeignKey("shloks.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(UUID(as_uuid=True), ForeignKey("problems.id"), nullable=False)
    relevance_score = Column(Float, nullable=True)

    # Relationships
    shlok = relationship("Shlok", back_populates="problem_links")
    problem = relationship("Problem", back_populates="shlok_links")

    __table_args__ = (
        Index('ix_shlok_problems_problem_id', 'problem_id'),
        Index('ix_shlok_problems_shlok_id', 'shlok_id'),
    )
