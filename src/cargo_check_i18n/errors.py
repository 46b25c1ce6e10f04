from dataclasses import dataclass


class CargoCheckI18nError(Exception):
    """Base class for all errors raised by cargo-check-i18n."""


class ConfigError(CargoCheckI18nError):
    pass


class TemplateError(CargoCheckI18nError):
    pass


class ExtractionError(CargoCheckI18nError):
    def __init__(self, path: str, segment: str, reason: str) -> None:
        self.path = path
        self.segment = segment
        self.reason = reason
        super().__init__(f"Cannot extract '{path}' at segment '{segment}': {reason}")


class TranslationError(CargoCheckI18nError):
    """A single text field could not be translated; the original text is kept."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Translation unavailable: {reason}")


class CacheError(CargoCheckI18nError):
    pass


@dataclass(frozen=True)
class DecodeWarning:
    """A diagnostic line that was skipped because it could not be decoded."""

    line_number: int
    reason: str


class CargoLaunchError(CargoCheckI18nError):
    pass
