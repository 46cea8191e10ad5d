"""
Translation provider abstraction.

Supports DeepL, Google Cloud Translation, OpenAI, MTranServer and the
key-less Google web translator as pluggable machine-translation backends.
Providers are plain synchronous clients; the engine runs them in worker
threads with a timeout and decides the fallback order.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from folio_core import get_logger
from folio_core.config import TranslationConfig

logger = get_logger(__name__)

# Google web translator has a ~5000 character limit per request
_CHUNK_SIZE = 4500


class TranslationProvider(ABC):
    """Base class for translation providers."""

    name: str = "provider"

    @abstractmethod
    def translate(self, text: str, source: str, target: str) -> str:
        """Translate a single text string."""

    def is_available(self) -> bool:
        """Whether the provider has what it needs (credentials, endpoint) to run."""
        return True


class DeepLProvider(TranslationProvider):
    """DeepL translation provider."""

    name = "DeepL"

    # DeepL uses regional variants for some target languages
    _TARGET_MAP: dict[str, str] = {
        "en": "EN-US",
        "pt": "PT-BR",
    }

    def __init__(self, api_key: str, is_pro: bool = False, timeout: float = 15.0) -> None:
        self.api_key = api_key
        self.is_pro = is_pro
        self.timeout = timeout

    def _translator(self) -> Any:
        import deepl

        deepl.http_client.min_connection_timeout = self.timeout
        server_url = "https://api.deepl.com" if self.is_pro else None
        return deepl.Translator(self.api_key, server_url=server_url)

    def _map_target(self, lang: str) -> str:
        return self._TARGET_MAP.get(lang, lang.upper())

    def is_available(self) -> bool:
        return bool(self.api_key)

    def translate(self, text: str, source: str, target: str) -> str:
        if not text or not text.strip():
            return text

        result = self._translator().translate_text(
            text,
            source_lang=source.upper(),
            target_lang=self._map_target(target),
            preserve_formatting=True,
            tag_handling="html",
        )
        return str(result)


class GoogleCloudProvider(TranslationProvider):
    """Google Cloud Translation v2 REST API, authenticated by API key."""

    name = "Google Translate"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://translation.googleapis.com/language/translate/v2",
        timeout: float = 15.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _post(self, q: str, source: str, target: str) -> list[str]:
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(
                self.base_url,
                params={"key": self.api_key},
                json={"q": q, "source": source, "target": target, "format": "html"},
            )
            response.raise_for_status()
            data = response.json()

        translations = data.get("data", {}).get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list):
            raise ValueError("Google Translate response does not contain translations")
        return [str(item.get("translatedText", "")) for item in translations]

    def translate(self, text: str, source: str, target: str) -> str:
        if not text or not text.strip():
            return text
        results = self._post(text, source, target)
        if not results:
            raise ValueError("Google Translate returned no translation")
        return results[0]


class OpenAIProvider(TranslationProvider):
    """OpenAI translation provider."""

    name = "OpenAI"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 15.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def translate(self, text: str, source: str, target: str) -> str:
        from openai import OpenAI

        if not text or not text.strip():
            return text

        client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": (
                        f"You are a translator for a personal portfolio website. "
                        f"Translate the following text from {source} to {target}. "
                        f"Keep HTML tags, product names and technical terms unchanged. "
                        f"Output only the translation, nothing else."
                    ),
                },
                {"role": "user", "content": text},
            ],
            temperature=0.3,
        )
        return response.choices[0].message.content or ""


class MTranProvider(TranslationProvider):
    """MTranServer translation provider via local HTTP service."""

    name = "MTranServer"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 15.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def _extract_single(data: Any) -> str | None:
        if isinstance(data, str):
            return data

        if isinstance(data, dict):
            for key in ("translation", "translated_text", "text", "result"):
                value = data.get(key)
                if isinstance(value, str):
                    return value

            nested = data.get("data")
            if isinstance(nested, dict):
                return MTranProvider._extract_single(nested)
        return None

    def translate(self, text: str, source: str, target: str) -> str:
        if not text or not text.strip():
            return text

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(
                f"{self.base_url}/translate",
                json={"text": text, "source": source, "target": target},
                headers=self._headers(),
            )
            response.raise_for_status()
            translated = self._extract_single(response.json())
            if translated is None:
                raise ValueError("MTranServer response does not contain translated text")
            return translated


class GoogleFreeProvider(TranslationProvider):
    """Key-less Google web translator via deep-translator. Opt-in only."""

    name = "Google (free)"

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled

    def is_available(self) -> bool:
        return self.enabled

    def translate(self, text: str, source: str, target: str) -> str:
        from deep_translator import GoogleTranslator

        if not text or not text.strip():
            return text
        translator = GoogleTranslator(source=source, target=target)
        result: str = translator.translate(text[:_CHUNK_SIZE])
        return result


def create_translation_providers(config: TranslationConfig) -> list[TranslationProvider]:
    """
    Create providers in the configured order.

    Provider names in ``config.provider_order``:
        - deepl: DeepL (needs ``deepl_api_key``)
        - google: Google Cloud Translation (needs ``google_api_key``)
        - openai: OpenAI chat completions (needs ``openai_api_key``)
        - mtran: MTranServer (needs ``mtran_base_url``)
        - google_free: deep-translator web client (needs ``google_free_enabled``)

    Unknown names are logged and skipped. Providers without credentials are
    still returned; the engine filters them with ``is_available()``.
    """
    timeout = config.provider_timeout_seconds
    providers: list[TranslationProvider] = []

    for name in config.provider_names:
        if name == "deepl":
            providers.append(DeepLProvider(config.deepl_api_key, config.deepl_pro, timeout))
        elif name == "google":
            providers.append(GoogleCloudProvider(config.google_api_key, timeout=timeout))
        elif name == "openai":
            providers.append(
                OpenAIProvider(config.openai_api_key, config.openai_model, timeout)
            )
        elif name == "mtran":
            providers.append(
                MTranProvider(config.mtran_base_url, config.mtran_api_key, timeout)
            )
        elif name == "google_free":
            providers.append(GoogleFreeProvider(config.google_free_enabled))
        else:
            logger.warning("Unknown translation provider in config", extra={"provider": name})

    return providers
