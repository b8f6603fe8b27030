"""
Internationalization (i18n) module for the IP filter system.

Provides translations for all caller-facing diagnostics and CLI output in
English (en) and German (de). English is the default; its texts are the
diagnostics agents already expect from the tool.
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"en", "de"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Evaluation diagnostics
    "evaluation.invalid_address": {
        "en": "Invalid IP address format: {ip_address}",
        "de": "Ungültiges IP-Adressformat: {ip_address}",
    },
    "evaluation.no_ranges": {
        "en": "No CIDR ranges provided",
        "de": "Keine CIDR-Bereiche angegeben",
    },
    "evaluation.invalid_ranges": {
        "en": "Invalid CIDR ranges: {ranges}",
        "de": "Ungültige CIDR-Bereiche: {ranges}",
    },
    "evaluation.not_in_range": {
        "en": "IP address is not in any of the valid CIDR ranges",
        "de": "IP-Adresse liegt in keinem der gültigen CIDR-Bereiche",
    },
    "evaluation.denylisted": {
        "en": "IP address {ip_address} is a Tor exit node",
        "de": "IP-Adresse {ip_address} ist ein Tor-Exit-Node",
    },

    # Denylist messages
    "denylist.refreshed": {
        "en": "Denylist refreshed with {count} entries",
        "de": "Sperrliste mit {count} Einträgen aktualisiert",
    },
    "denylist.fetch_failed": {
        "en": "Denylist fetch failed: {error}",
        "de": "Abruf der Sperrliste fehlgeschlagen: {error}",
    },
    "denylist.using_stale": {
        "en": "Using stale denylist with {count} entries",
        "de": "Verwende veraltete Sperrliste mit {count} Einträgen",
    },

    # Server and CLI messages
    "server.starting": {
        "en": "Starting MCP server '{name}' on {transport}",
        "de": "Starte MCP-Server '{name}' über {transport}",
    },
    "cli.config_error": {
        "en": "Configuration error: {error}",
        "de": "Konfigurationsfehler: {error}",
    },
    "cli.denylist_count": {
        "en": "{count} denylist entries from {url}",
        "de": "{count} Einträge in der Sperrliste von {url}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'evaluation.no_ranges')
        language: Language code ('en' or 'de'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('evaluation.no_ranges', 'en')
        'No CIDR ranges provided'
        >>> get_message('evaluation.denylisted', 'de', ip_address='192.0.2.1')
        'IP-Adresse 192.0.2.1 ist ein Tor-Exit-Node'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)

    if translations is None:
        return key

    message = translations.get(language)

    if message is None:
        message = translations.get(DEFAULT_LANGUAGE)

    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Missing placeholder values: keep the template
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """Check if a translation exists for a key and language."""
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    return {
        key
        for key, translations in TRANSLATIONS.items()
        if language not in translations
    }
