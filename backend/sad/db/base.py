"""Declarative base and portable column types shared by all models."""
from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Hosted DB uses uuid / jsonb; tests run on SQLite with the generic types.
UUIDStr = String(36).with_variant(UUID(as_uuid=False), "postgresql")
JSONDict = JSON().with_variant(JSONB(), "postgresql")
