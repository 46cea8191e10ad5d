"""
Domain exceptions.

Services raise these; API routers translate them into HTTP errors.
"""


class ContentValidationError(ValueError):
    """Structured content does not match the shape registered for its field."""

    def __init__(self, section: str, tag: str, detail: str) -> None:
        self.section = section
        self.tag = tag
        self.detail = detail
        super().__init__(f"Invalid content for {section}.{tag}: {detail}")


class TranslationNotFoundError(ValueError):
    """No translation record exists for the requested key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Translation {key} not found")


class EngineUnavailableError(RuntimeError):
    """No translation provider has credentials configured."""

    def __init__(self) -> None:
        super().__init__("No translation providers available. Please configure API keys.")


class BundleLoadError(RuntimeError):
    """The source-locale message bundle could not be loaded."""
