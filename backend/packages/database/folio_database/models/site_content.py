"""
Site content model.
"""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, generate_uuid


class SiteContent(Base, TimestampMixin):
    """
    Admin-authored content override.

    ``value`` holds either a scalar string or serialized JSON (a locale map,
    a list of structured items, or a key/value object).
    """

    __tablename__ = "site_content"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    section: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    tag: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (UniqueConstraint("section", "tag", name="uq_site_content_section_tag"),)
