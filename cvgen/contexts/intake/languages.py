"""Supported content languages and alias normalization."""

from typing import Optional

from cvgen.exceptions import InvalidLanguage

SUPPORTED_LANGUAGES = ("en", "fr", "es", "de")
DEFAULT_LANGUAGE = "en"

LANGUAGE_ALIASES = {
    "english": "en",
    "anglais": "en",
    "french": "fr",
    "français": "fr",
    "francais": "fr",
    "spanish": "es",
    "español": "es",
    "espanol": "es",
    "german": "de",
    "deutsch": "de",
}


def normalize_language(lang: Optional[str]) -> str:
    """
    Map a language code or alias to a supported code.

    None or an empty string selects DEFAULT_LANGUAGE.

    Raises:
        InvalidLanguage: If the language is neither a supported code nor a known alias
    """
    if lang is None or not lang.strip():
        return DEFAULT_LANGUAGE

    key = lang.strip().lower()
    code = LANGUAGE_ALIASES.get(key, key)
    if code not in SUPPORTED_LANGUAGES:
        raise InvalidLanguage(lang, SUPPORTED_LANGUAGES)
    return code
