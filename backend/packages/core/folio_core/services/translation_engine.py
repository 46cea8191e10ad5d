"""
Translation engine.

Translates one source text into several target locales using an ordered
list of providers. The primary provider gets every target locale; locales
it fails on are retried with the next provider, and so on. Each attempt
produces a ``ProviderOutcome`` value, so partial success is an ordinary
return value rather than an exception.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from folio_core import get_logger
from folio_core.config import TranslationConfig
from folio_core.locales import SOURCE_LOCALE, TARGET_LOCALES, is_rtl
from folio_core.rtl import process_mixed_content

from .translation_providers import TranslationProvider, create_translation_providers

logger = get_logger(__name__)


@dataclass(frozen=True)
class TranslationRequest:
    """One source text to translate into several locales."""

    text: str
    key: str
    source_locale: str = SOURCE_LOCALE
    target_locales: Sequence[str] = TARGET_LOCALES
    context: str | None = None


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of one provider call for one locale: a value or an error."""

    value: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.value and self.value.strip())


@dataclass(frozen=True)
class TranslationError:
    """A locale that no provider could translate."""

    key: str
    locale: str
    provider: str | None
    message: str

    def __str__(self) -> str:
        via = f" via {self.provider}" if self.provider else ""
        return f"Failed to translate {self.key} to {self.locale}{via}: {self.message}"


@dataclass
class TranslationResult:
    """
    Outcome of ``TranslationEngine.translate_content``.

    Attributes:
        key: Translation key.
        per_locale: Text for every requested locale. Locales that failed
            carry the unchanged source text.
        translated: Only the locales a provider actually translated. This is
            what callers persist.
        errors: One entry per failed locale.
        providers_used: Provider name per translated locale.
    """

    key: str
    per_locale: dict[str, str] = field(default_factory=dict)
    translated: dict[str, str] = field(default_factory=dict)
    errors: list[TranslationError] = field(default_factory=list)
    providers_used: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def failed_locales(self) -> list[str]:
        return [e.locale for e in self.errors]

    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]


class TranslationEngine:
    """Machine-translation front end over an ordered provider list."""

    def __init__(
        self,
        providers: Sequence[TranslationProvider],
        provider_timeout: float = 15.0,
    ) -> None:
        self.providers = [p for p in providers if p.is_available()]
        self.provider_timeout = provider_timeout

    @classmethod
    def from_config(cls, config: TranslationConfig) -> "TranslationEngine":
        """Build an engine with the providers configured in the environment."""
        engine = cls(
            create_translation_providers(config),
            provider_timeout=config.provider_timeout_seconds,
        )
        logger.info(
            "Translation engine initialized",
            extra={"providers": engine.get_available_providers()},
        )
        return engine

    def is_available(self) -> bool:
        """True iff at least one provider has credentials configured."""
        return bool(self.providers)

    def get_available_providers(self) -> list[str]:
        """Provider names, primary first."""
        return [p.name for p in self.providers]

    async def _call_provider(
        self, provider: TranslationProvider, text: str, source: str, target: str
    ) -> ProviderOutcome:
        # On timeout the worker thread is abandoned, not cancelled; the HTTP
        # provider clients carry their own request timeout, which bounds it.
        try:
            value = await asyncio.wait_for(
                asyncio.to_thread(provider.translate, text, source, target),
                timeout=self.provider_timeout,
            )
        except TimeoutError:
            return ProviderOutcome(error=f"timed out after {self.provider_timeout:g}s")
        except Exception as e:
            return ProviderOutcome(error=str(e) or e.__class__.__name__)

        if not value or not value.strip():
            return ProviderOutcome(error="empty translation")
        return ProviderOutcome(value=value)

    async def translate_content(self, request: TranslationRequest) -> TranslationResult:
        """
        Translate text into every requested target locale.

        Args:
            request: Text, key, source locale and target locales.

        Returns:
            TranslationResult. Never raises for provider failures; they are
            reported in ``errors`` and the failed locales keep the source
            text in ``per_locale``.
        """
        text = request.text
        source = request.source_locale
        result = TranslationResult(key=request.key)

        targets = list(dict.fromkeys(request.target_locales))
        if source in targets:
            result.per_locale[source] = text
        remaining = [locale for locale in targets if locale != source]

        if not text or not text.strip():
            for locale in remaining:
                result.per_locale[locale] = text
            return result

        last_error: dict[str, TranslationError] = {}

        for provider in self.providers:
            if not remaining:
                break

            outcomes = await asyncio.gather(
                *(self._call_provider(provider, text, source, locale) for locale in remaining)
            )

            still_failing: list[str] = []
            for locale, outcome in zip(remaining, outcomes, strict=True):
                if outcome.ok and outcome.value is not None:
                    result.translated[locale] = process_mixed_content(outcome.value, is_rtl(locale))
                    result.providers_used[locale] = provider.name
                    continue

                message = outcome.error or "empty translation"
                last_error[locale] = TranslationError(
                    key=request.key, locale=locale, provider=provider.name, message=message
                )
                still_failing.append(locale)
                logger.warning(
                    "Translation provider failed",
                    extra={
                        "provider": provider.name,
                        "key": request.key,
                        "locale": locale,
                        "error": message,
                    },
                )
            remaining = still_failing

        for locale in remaining:
            result.errors.append(
                last_error.get(locale)
                or TranslationError(
                    key=request.key,
                    locale=locale,
                    provider=None,
                    message="No translation providers available",
                )
            )
            result.per_locale[locale] = text

        result.per_locale.update(result.translated)

        if result.errors:
            logger.warning(
                "Translation incomplete",
                extra={"key": request.key, "failed_locales": result.failed_locales},
            )
        return result
