"""
Built-in defaults for structured content.

When no override exists for a structured field (skill categories, service
cards), the resolver synthesizes it from these templates. English text
comes from the source message bundle; every other locale is left blank so
missing translations stay visible instead of silently mirroring English.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from folio_core import get_logger
from folio_core.bundles import StaticBundleLoader
from folio_core.schemas.content import ContentItem, ServiceItem, SkillCategory

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemTemplate:
    """
    One synthesized item.

    Attributes:
        id: Stable item id.
        texts: Localized field name to source-bundle key.
        extra: Non-localized field values.
    """

    id: str
    texts: Mapping[str, str]
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldTemplate:
    """Template for a structured ``(section, tag)`` field."""

    section: str
    tag: str
    item_type: type[ContentItem]
    items: tuple[ItemTemplate, ...]


def _skills(*names: str) -> list[dict[str, str]]:
    return [{"name": name} for name in names]


DEFAULT_TEMPLATES: tuple[FieldTemplate, ...] = (
    FieldTemplate(
        section="technical_skills",
        tag="categories",
        item_type=SkillCategory,
        items=(
            ItemTemplate(
                id="cat_full",
                texts={"name": "skills.catFullTitle", "description": "skills.catFullDesc"},
                extra={"skills": _skills("React", "Next.js", "TypeScript", "Flutter", "Node.js")},
            ),
            ItemTemplate(
                id="cat_data",
                texts={"name": "skills.catDataTitle", "description": "skills.catDataDesc"},
                extra={"skills": _skills("Python", "SQL", "PostgreSQL", "ETL")},
            ),
            ItemTemplate(
                id="cat_cloud",
                texts={"name": "skills.catCloudTitle", "description": "skills.catCloudDesc"},
                extra={"skills": _skills("AWS", "Firebase", "Docker", "GitHub Actions")},
            ),
        ),
    ),
    FieldTemplate(
        section="services",
        tag="items",
        item_type=ServiceItem,
        items=(
            ItemTemplate(
                id="web",
                texts={"title": "services.webTitle", "description": "services.webDesc"},
                extra={"icon": "Globe", "technologies": ["React", "Next.js", "TypeScript"]},
            ),
            ItemTemplate(
                id="mobile",
                texts={"title": "services.mobileTitle", "description": "services.mobileDesc"},
                extra={"icon": "Smartphone", "technologies": ["Flutter", "React Native"]},
            ),
            ItemTemplate(
                id="data",
                texts={"title": "services.dataTitle", "description": "services.dataDesc"},
                extra={"icon": "Database", "technologies": ["Python", "SQL", "ETL"]},
            ),
        ),
    ),
)


class DefaultsCatalog:
    """Synthesis templates for structured fields without an override."""

    def __init__(
        self,
        bundles: StaticBundleLoader,
        templates: tuple[FieldTemplate, ...] = DEFAULT_TEMPLATES,
    ) -> None:
        self.bundles = bundles
        self._templates = {(t.section, t.tag): t for t in templates}

    def has_template(self, section: str, tag: str) -> bool:
        return (section, tag) in self._templates

    def fields_for_section(self, section: str) -> list[str]:
        """Structured field names with a template in the section."""
        return [tag for (sec, tag) in self._templates if sec == section]

    def synthesize(self, section: str, tag: str) -> list[ContentItem] | None:
        """
        Build the default items for a structured field.

        Returns:
            Items with English populated from the source bundle, other
            locales blank and ``hidden`` false. None if no template exists.
        """
        template = self._templates.get((section, tag))
        if template is None:
            return None

        source = self.bundles.source_locale
        items: list[ContentItem] = []
        for item in template.items:
            data: dict[str, Any] = {"id": item.id, "hidden": False, **item.extra}
            for name, bundle_key in item.texts.items():
                text = self.bundles.get(source, bundle_key)
                if text is None:
                    logger.warning(
                        "Default template references missing bundle key",
                        extra={"section": section, "tag": tag, "key": bundle_key},
                    )
                data[name] = {source: text or ""}
            items.append(template.item_type.model_validate(data))
        return items
