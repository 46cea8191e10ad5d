"""
Content schemas.

Structured content variants stored in site content overrides, and the
request models of the content endpoints.
"""

from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, RootModel, TypeAdapter

from folio_core.locales import SOURCE_LOCALE


def _coerce_localized(value: Any) -> Any:
    """A bare string is source-locale text."""
    if isinstance(value, str):
        return {SOURCE_LOCALE: value}
    if value is None:
        return {}
    return value


LocalizedText = Annotated[dict[str, str], BeforeValidator(_coerce_localized)]


class ContentItem(BaseModel):
    """
    Base class for structured content items.

    Subclasses list their per-locale fields in ``LOCALIZED_FIELDS``;
    ``localized`` flattens those to the requested locale.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str
    hidden: bool = False
    hidden_translations: dict[str, bool] = Field(
        default_factory=dict, alias="hiddenTranslations"
    )

    @property
    def effectively_hidden(self) -> bool:
        return self.hidden or any(self.hidden_translations.values())

    def localized(self, locale: str, fallback_locale: str | None = None) -> dict[str, Any]:
        """
        Item with localized fields reduced to one locale.

        A locale without a non-blank value takes the ``fallback_locale``
        text when one is given, and is blank otherwise.
        """
        data = self.model_dump(exclude={"hidden_translations"})
        for name in self.LOCALIZED_FIELDS:
            texts = getattr(self, name, None)
            if isinstance(texts, dict):
                text = texts.get(locale) or ""
                if not text.strip() and fallback_locale:
                    text = texts.get(fallback_locale) or ""
                data[name] = text
        data["hidden"] = self.effectively_hidden
        return data


class Skill(BaseModel):
    """Single skill inside a category."""

    model_config = ConfigDict(extra="allow")

    name: str
    icon: str = ""
    color: str = ""
    category: str = ""


class SkillCategory(ContentItem):
    """Technical skills category."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = ("name", "description")

    name: LocalizedText
    description: LocalizedText = Field(default_factory=dict)
    skills: list[Skill] = Field(default_factory=list)


class ServiceItem(ContentItem):
    """Offered service card."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = ("title", "description")

    title: LocalizedText
    description: LocalizedText = Field(default_factory=dict)
    icon: str = ""
    technologies: list[str] = Field(default_factory=list)


class ProjectContent(ContentItem):
    """Portfolio project."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "description",
        "problem",
        "solution",
        "outcome",
        "architecture",
        "impact",
    )

    slug: str
    title: LocalizedText
    description: LocalizedText = Field(default_factory=dict)
    image: str | None = None
    technologies: list[str] = Field(default_factory=list)
    github_url: str | None = Field(default=None, alias="githubUrl")
    live_url: str | None = Field(default=None, alias="liveUrl")
    problem: LocalizedText = Field(default_factory=dict)
    solution: LocalizedText = Field(default_factory=dict)
    outcome: LocalizedText = Field(default_factory=dict)
    architecture: LocalizedText = Field(default_factory=dict)
    impact: LocalizedText = Field(default_factory=dict)
    features: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    learnings: list[str] = Field(default_factory=list)
    show_details: bool = Field(default=True, alias="showDetails")
    show_live: bool = Field(default=True, alias="showLive")
    show_repo: bool = Field(default=True, alias="showRepo")


class GenericKeyValue(RootModel[dict[str, Any]]):
    """Free-form object stored under an unregistered tag."""


# (section, tag) -> item type of the list stored there
STRUCTURED_FIELDS: dict[tuple[str, str], type[ContentItem]] = {
    ("technical_skills", "categories"): SkillCategory,
    ("services", "items"): ServiceItem,
    ("projects", "items"): ProjectContent,
}

_LIST_ADAPTERS: dict[type[ContentItem], TypeAdapter[Any]] = {
    item_type: TypeAdapter(list[item_type]) for item_type in set(STRUCTURED_FIELDS.values())
}


def structured_type(section: str, tag: str) -> type[ContentItem] | None:
    """Item type registered for a structured field, if any."""
    return STRUCTURED_FIELDS.get((section, tag))


def list_adapter(item_type: type[ContentItem]) -> TypeAdapter[Any]:
    return _LIST_ADAPTERS[item_type]


class ContentUpsertRequest(BaseModel):
    """Raw site content write."""

    section: str = Field(min_length=1, max_length=100)
    tag: str = Field(min_length=1, max_length=255)
    value: Any


class MultilangContentRequest(BaseModel):
    """
    Multi-language section save.

    ``content`` maps field name to ``{locale: value}``. Hidden flags travel
    as sibling fields (``<field>_hidden``, ``<field>_translations_hidden``).
    """

    section: str = Field(min_length=1, max_length=100)
    content: dict[str, Any]


class ContentRecordResponse(BaseModel):
    """Site content row."""

    model_config = ConfigDict(from_attributes=True)

    section: str
    tag: str
    value: str


class MultilangSaveResponse(BaseModel):
    """Result of a multi-language section save."""

    section: str
    saved_fields: list[str]
    translation_keys: list[str]
