from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase

# All identifiers (UUIDs, external pack ids, SHA-256 hex digests) are strings
IDENTIFIER_LENGTH = 255


class Base(DeclarativeBase):
    """Declarative base for all sticker archive ORM models."""

    type_annotation_map = {
        str: String(IDENTIFIER_LENGTH),
    }
