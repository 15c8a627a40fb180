"""Declarative base shared by every studio table."""

import uuid
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from photo_studio.utils.date_utils import utcnow

PROTECTED_FIELDS: FrozenSet[str] = frozenset({'id', 'created_at', 'updated_at'})


def new_id() -> str:
    return str(uuid.uuid4())


class Base:
    """UUID primary key plus naive-UTC audit timestamps."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def update_from_dict(self, data: Dict[str, Any], exclude: Optional[Iterable[str]] = None) -> List[str]:
        """Copy known column values from ``data``; returns the columns written.

        Keys that are not columns of the table, and the protected fields, are
        ignored, so request payloads can be passed through as they are.
        """
        skip = PROTECTED_FIELDS if exclude is None else frozenset(exclude)
        columns = self.__table__.columns

        written = []
        for key, value in data.items():
            if key in skip or key not in columns:
                continue
            setattr(self, key, value)
            written.append(key)
        return written

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


Base = declarative_base(cls=Base)
