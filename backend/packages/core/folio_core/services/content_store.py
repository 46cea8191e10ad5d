"""
Content store.

Per-section, per-tag overrides backed by the ``site_content`` table.
Values are validated and serialized on write and decoded on read; stored
rows that no longer decode to their registered shape are quarantined as
raw strings instead of breaking the page.
"""

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core import get_logger
from folio_core.exceptions import ContentValidationError
from folio_core.locales import SOURCE_LOCALE
from folio_core.schemas.content import GenericKeyValue, list_adapter, structured_type
from folio_database.models import SiteContent

logger = get_logger(__name__)

HIDDEN_SUFFIX = "_hidden"
TRANSLATIONS_HIDDEN_SUFFIX = "_translations_hidden"

_HIDDEN_MAP_ADAPTER: TypeAdapter[dict[str, bool]] = TypeAdapter(dict[str, bool])


def is_hidden_flag(tag: str) -> bool:
    """Whether a tag is a hidden-flag sibling rather than a content field."""
    return tag.endswith(HIDDEN_SUFFIX)


def truthy(value: Any) -> bool:
    """Interpret bool-ish stored values ("true", {"en": "true"}, True)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    if isinstance(value, dict):
        return any(truthy(v) for v in value.values())
    return False


def decode_scalar(raw: str) -> Any:
    """
    Decode a stored value.

    JSON objects and arrays are parsed, "true"/"false" become booleans and
    anything else is returned as the raw string. Malformed JSON degrades to
    the raw string.
    """
    stripped = raw.strip()
    if stripped in ("true", "false"):
        return stripped == "true"
    if stripped[:1] in ("{", "["):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return raw
    return raw


def _unwrap_legacy_list(value: Any) -> Any:
    # Older admin saves stored structured lists as {"en": "<json array>"}
    if isinstance(value, dict) and isinstance(value.get(SOURCE_LOCALE), str):
        inner = decode_scalar(value[SOURCE_LOCALE])
        if isinstance(inner, list):
            return inner
    return value


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def serialize_value(section: str, tag: str, value: Any) -> str:
    """
    Validate a value for ``(section, tag)`` and serialize it for storage.

    Raises:
        ContentValidationError: If the value does not match the registered
            shape of the field.
    """
    if tag.endswith(TRANSLATIONS_HIDDEN_SUFFIX):
        if isinstance(value, str):
            value = decode_scalar(value)
        try:
            flags = _HIDDEN_MAP_ADAPTER.validate_python(value)
        except ValidationError as e:
            raise ContentValidationError(section, tag, "expected {locale: bool}") from e
        return _dump(flags)

    if tag.endswith(HIDDEN_SUFFIX):
        return "true" if truthy(value) else "false"

    item_type = structured_type(section, tag)
    if item_type is not None:
        if isinstance(value, str):
            value = decode_scalar(value)
        value = _unwrap_legacy_list(value)
        try:
            items = list_adapter(item_type).validate_python(value)
        except ValidationError as e:
            errors = e.errors()
            detail = errors[0]["msg"] if errors else str(e)
            raise ContentValidationError(section, tag, detail) from e
        return _dump([item.model_dump(mode="json") for item in items])

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        try:
            return _dump(GenericKeyValue.model_validate(value).root)
        except ValidationError as e:
            raise ContentValidationError(section, tag, "expected a JSON object") from e
    if isinstance(value, list):
        return _dump(value)
    raise ContentValidationError(section, tag, f"unsupported type {type(value).__name__}")


def deserialize_value(section: str, tag: str, raw: str) -> Any:
    """
    Decode a stored value for ``(section, tag)``.

    Structured fields decode to a list of content items. A structured row
    that does not validate is logged and returned as the raw string.
    """
    value = decode_scalar(raw)
    item_type = structured_type(section, tag)
    if item_type is None:
        return value

    value = _unwrap_legacy_list(value)
    try:
        return list_adapter(item_type).validate_python(value)
    except ValidationError as e:
        logger.warning(
            "Quarantined invalid structured content",
            extra={"section": section, "tag": tag, "error_count": e.error_count()},
        )
        return raw


class ContentStore:
    """Site content override access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, section: str, tag: str) -> SiteContent | None:
        stmt = select(SiteContent).where(SiteContent.section == section, SiteContent.tag == tag)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_section(self, section: str) -> list[SiteContent]:
        stmt = select(SiteContent).where(SiteContent.section == section).order_by(SiteContent.tag)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def section_values(self, section: str) -> dict[str, Any]:
        """Decoded values of every tag in a section."""
        return {
            record.tag: deserialize_value(section, record.tag, record.value)
            for record in await self.list_section(section)
        }

    async def upsert(self, section: str, tag: str, value: Any) -> SiteContent:
        """
        Validate, serialize and store a value.

        Args:
            section: Section name.
            tag: Field name within the section.
            value: Scalar, locale map, list of items or hidden flag.

        Returns:
            The created or updated row (flushed, not committed).

        Raises:
            ContentValidationError: If the value has the wrong shape.
        """
        serialized = serialize_value(section, tag, value)

        record = await self.get(section, tag)
        if record is None:
            record = SiteContent(section=section, tag=tag, value=serialized)
            self.session.add(record)
        else:
            record.value = serialized

        await self.session.flush()
        return record
