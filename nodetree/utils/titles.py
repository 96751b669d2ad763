"""Node titles: the id of a node spelled out as words in a given language."""

from num2words import num2words

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = frozenset({"en", "es", "fr", "de"})


def normalize_language(language: str | None) -> str:
    """Lowercased ISO 639-1 code, or the default when unsupported."""
    if not language:
        return DEFAULT_LANGUAGE
    language = language.strip().lower()
    return language if language in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def render_title(number: int, language: str | None = None) -> str:
    """Cardinal word form of ``number``, e.g. 21 -> "twenty-one"."""
    return num2words(number, lang=normalize_language(language))


def parse_language(header: str | None) -> str | None:
    """Primary subtag of the first Accept-Language entry.

    "es-ES,es;q=0.9,en;q=0.8" -> "es". None when the header is missing or blank.
    """
    if not header:
        return None
    first = header.split(",")[0].split(";")[0].strip()
    primary = first.split("-")[0].strip().lower()
    return primary or None
