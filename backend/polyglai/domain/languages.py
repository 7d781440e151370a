"""Language identifiers, aliases and Azure recognition locales."""

DEFAULT_LANGUAGE = "english"
DEFAULT_LOCALE = "en-US"

# Learner-facing languages with phoneme tables
SUPPORTED_LANGUAGES = ("english", "mandarin", "japanese", "spanish", "korean")

# CJK languages compare text exactly (no case folding)
CASELESS_LANGUAGES = frozenset(["mandarin", "japanese", "korean"])

LANGUAGE_ALIASES: dict[str, str] = {
    # canonical
    "english": "english",
    "mandarin": "mandarin",
    "chinese": "mandarin",
    "spanish": "spanish",
    "japanese": "japanese",
    "korean": "korean",
    # short codes
    "en": "english",
    "zh": "mandarin",
    "zh-cn": "mandarin",
    "es": "spanish",
    "ja": "japanese",
    "ko": "korean",
    # localized/display names
    "nihongo": "japanese",
    "日本語": "japanese",
    "hangugeo": "korean",
    "한국어": "korean",
    "espanol": "spanish",
    "español": "spanish",
    "castellano": "spanish",
    "中文": "mandarin",
    "汉语": "mandarin",
    "漢語": "mandarin",
    "普通话": "mandarin",
    "國語": "mandarin",
}

AZURE_LOCALES: dict[str, str] = {
    "english": "en-US",
    "mandarin": "zh-CN",
    "japanese": "ja-JP",
    "spanish": "es-ES",
    "korean": "ko-KR",
}

# Recognition languages offered by the speech service
RECOGNITION_LANGUAGES: dict[str, str] = {
    "en-US": "English (United States)",
    "en-GB": "English (United Kingdom)",
    "en-AU": "English (Australia)",
    "en-CA": "English (Canada)",
    "en-IN": "English (India)",
    "es-ES": "Spanish (Spain)",
    "es-MX": "Spanish (Mexico)",
    "fr-FR": "French (France)",
    "fr-CA": "French (Canada)",
    "de-DE": "German (Germany)",
    "it-IT": "Italian (Italy)",
    "pt-BR": "Portuguese (Brazil)",
    "pt-PT": "Portuguese (Portugal)",
    "ru-RU": "Russian (Russia)",
    "ja-JP": "Japanese (Japan)",
    "ko-KR": "Korean (Korea)",
    "zh-CN": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
    "ar-SA": "Arabic (Saudi Arabia)",
    "hi-IN": "Hindi (India)",
    "th-TH": "Thai (Thailand)",
    "vi-VN": "Vietnamese (Vietnam)",
    "tr-TR": "Turkish (Turkey)",
    "nl-NL": "Dutch (Netherlands)",
    "sv-SE": "Swedish (Sweden)",
    "da-DK": "Danish (Denmark)",
    "fi-FI": "Finnish (Finland)",
    "pl-PL": "Polish (Poland)",
    "cs-CZ": "Czech (Czech Republic)",
    "hu-HU": "Hungarian (Hungary)",
    "ro-RO": "Romanian (Romania)",
    "bg-BG": "Bulgarian (Bulgaria)",
    "hr-HR": "Croatian (Croatia)",
    "sk-SK": "Slovak (Slovakia)",
    "sl-SI": "Slovenian (Slovenia)",
    "et-EE": "Estonian (Estonia)",
    "lv-LV": "Latvian (Latvia)",
    "lt-LT": "Lithuanian (Lithuania)",
    "el-GR": "Greek (Greece)",
    "he-IL": "Hebrew (Israel)",
    "id-ID": "Indonesian (Indonesia)",
    "ms-MY": "Malay (Malaysia)",
    "fil-PH": "Filipino (Philippines)",
    "ta-IN": "Tamil (India)",
    "te-IN": "Telugu (India)",
    "af-ZA": "Afrikaans (South Africa)",
    "zu-ZA": "Zulu (South Africa)",
    "sw-KE": "Swahili (Kenya)",
    "am-ET": "Amharic (Ethiopia)",
}


def normalize_language(language: str) -> str:
    """Map a display name, alias or short code to a canonical language code.

    Unknown values are returned lowercased and trimmed so callers can still
    key per-language tables with them.
    """
    key = (language or "").strip().lower()
    return LANGUAGE_ALIASES.get(key, key)


def locale_for(language: str) -> str:
    """Azure recognition locale for a language (defaults to en-US)."""
    return AZURE_LOCALES.get(normalize_language(language), DEFAULT_LOCALE)


def texts_match(first: str, second: str, language: str) -> bool:
    """Language-aware equality used to look up reference texts.

    CJK languages compare exactly; cased languages ignore case.
    """
    if not first or not second:
        return False
    if normalize_language(language) in CASELESS_LANGUAGES:
        return first.strip() == second.strip()
    return first.strip().lower() == second.strip().lower()
