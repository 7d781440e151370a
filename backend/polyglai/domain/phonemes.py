"""Per-language grapheme to sound tables used by the phoneme breakdown.

English, Mandarin (pinyin) and Spanish are keyed by 1-2 character graphemes.
Japanese accepts both romaji and kana; Korean is described per Hangul
syllable by composing its jamo descriptions.
"""

UNKNOWN_SOUND = "Unknown sound"

ENGLISH: dict[str, str] = {
    "a": "Short A sound (cat, hat)",
    "e": "Short E sound (bed, red)",
    "i": "Short I sound (sit, hit)",
    "o": "Short O sound (hot, pot)",
    "u": "Short U sound (cut, hut)",
    "b": "B sound (bat, cab)",
    "c": "K sound (cat, cup)",
    "d": "D sound (dog, bed)",
    "f": "F sound (fan, leaf)",
    "g": "G sound (go, bag)",
    "h": "H sound (hat, hello)",
    "j": "J sound (jam, jump)",
    "k": "K sound (kite, book)",
    "l": "L sound (lip, ball)",
    "m": "M sound (man, ham)",
    "n": "N sound (net, sun)",
    "p": "P sound (pen, cap)",
    "r": "R sound (red, car)",
    "s": "S sound (sun, bus)",
    "t": "T sound (top, cat)",
    "v": "V sound (van, love)",
    "w": "W sound (wet, swim)",
    "x": "KS sound (box, fox)",
    "y": "Y sound (yes, yellow)",
    "z": "Z sound (zoo, buzz)",
    "th": "Voiced TH sound (this, that)",
    "sh": "SH sound (ship, fish)",
    "ch": "CH sound (chair, beach)",
    "ph": "F sound (phone, photo)",
    "wh": "WH sound (what, when)",
    "ng": "NG sound (sing, ring)",
    "ck": "K sound (back, pack)",
    "qu": "KW sound (queen, quick)",
    "ai": "Long A sound (rain, pain)",
    "ee": "Long E sound (see, tree)",
    "ie": "Long I sound (pie, tie)",
    "oa": "Long O sound (boat, coat)",
    "ue": "Long U sound (blue, true)",
    "ar": "AR sound (car, far)",
    "er": "ER sound (her, bird)",
    "ir": "IR sound (bird, girl)",
    "or": "OR sound (for, more)",
    "ur": "UR sound (fur, burn)",
}

MANDARIN: dict[str, str] = {
    "zh": "Retroflex ZH sound",
    "ch": "Retroflex CH sound",
    "sh": "Retroflex SH sound",
    "r": "Retroflex R sound",
    "z": "Dental Z sound",
    "c": "Dental C sound",
    "s": "Dental S sound",
    "j": "Palatal J sound",
    "q": "Palatal Q sound",
    "x": "Palatal X sound",
    "b": "Unaspirated B sound",
    "p": "Aspirated P sound",
    "d": "Unaspirated D sound",
    "t": "Aspirated T sound",
    "g": "Unaspirated G sound",
    "k": "Aspirated K sound",
    "m": "M sound",
    "n": "N sound",
    "ng": "NG sound",
    "l": "L sound",
    "h": "H sound",
    "f": "F sound",
    "w": "W sound",
    "y": "Y sound",
    "a": "A vowel sound",
    "o": "O vowel sound",
    "e": "E vowel sound",
    "i": "I vowel sound",
    "u": "U vowel sound",
    "ü": "Ü vowel sound",
}

# Romaji syllable -> kana; descriptions are derived from this table
_KANA: dict[str, str] = {
    "a": "あ", "i": "い", "u": "う", "e": "え", "o": "お",
    "ka": "か", "ki": "き", "ku": "く", "ke": "け", "ko": "こ",
    "sa": "さ", "shi": "し", "su": "す", "se": "せ", "so": "そ",
    "ta": "た", "chi": "ち", "tsu": "つ", "te": "て", "to": "と",
    "na": "な", "ni": "に", "nu": "ぬ", "ne": "ね", "no": "の",
    "ha": "は", "hi": "ひ", "fu": "ふ", "he": "へ", "ho": "ほ",
    "ma": "ま", "mi": "み", "mu": "む", "me": "め", "mo": "も",
    "ya": "や", "yu": "ゆ", "yo": "よ",
    "ra": "ら", "ri": "り", "ru": "る", "re": "れ", "ro": "ろ",
    "wa": "わ", "wo": "を", "n": "ん",
}


def _japanese_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for romaji, hiragana in _KANA.items():
        label = f"{romaji.upper()} sound" if len(romaji) > 1 or romaji == "n" else f"{romaji.upper()} vowel sound"
        table[romaji] = f"{label} ({hiragana})"
        table[hiragana] = label
        # Katakana sits 0x60 code points above hiragana
        table[chr(ord(hiragana) + 0x60)] = label
    return table


JAPANESE: dict[str, str] = _japanese_table()

SPANISH: dict[str, str] = {
    "a": "A vowel sound (ah)",
    "e": "E vowel sound (eh)",
    "i": "I vowel sound (ee)",
    "o": "O vowel sound (oh)",
    "u": "U vowel sound (oo)",
    "ñ": "NY sound (niño)",
    "ll": "Y sound (llama)",
    "rr": "Rolled R sound (perro)",
    "j": "H sound (jamón)",
    "h": "Silent H",
    "z": "TH sound (zapato)",
    "c": "K sound before a/o/u, TH sound before e/i",
    "g": "G sound before a/o/u, H sound before e/i",
    "b": "B sound",
    "v": "B sound (similar to b)",
    "d": "D sound",
    "t": "T sound",
    "p": "P sound",
    "k": "K sound",
    "f": "F sound",
    "s": "S sound",
    "m": "M sound",
    "n": "N sound",
    "l": "L sound",
    "r": "R sound (single tap)",
    "y": "Y sound",
    "w": "W sound",
    "x": "KS sound",
    "q": "K sound (always with u)",
}

KOREAN_JAMO: dict[str, str] = {
    "ㄱ": "G/K sound",
    "ㄲ": "Tense KK sound",
    "ㄴ": "N sound",
    "ㄷ": "D/T sound",
    "ㄸ": "Tense TT sound",
    "ㄹ": "R/L sound",
    "ㅁ": "M sound",
    "ㅂ": "B/P sound",
    "ㅃ": "Tense PP sound",
    "ㅅ": "S sound",
    "ㅆ": "Tense SS sound",
    "ㅇ": "NG sound (final) or silent (initial)",
    "ㅈ": "J sound",
    "ㅉ": "Tense JJ sound",
    "ㅊ": "CH sound",
    "ㅋ": "K sound",
    "ㅌ": "T sound",
    "ㅍ": "P sound",
    "ㅎ": "H sound",
    "ㅏ": "A vowel sound",
    "ㅐ": "AE vowel sound",
    "ㅑ": "YA vowel sound",
    "ㅒ": "YAE vowel sound",
    "ㅓ": "EO vowel sound",
    "ㅔ": "E vowel sound",
    "ㅕ": "YEO vowel sound",
    "ㅖ": "YE vowel sound",
    "ㅗ": "O vowel sound",
    "ㅘ": "WA vowel sound",
    "ㅙ": "WAE vowel sound",
    "ㅚ": "OE vowel sound",
    "ㅛ": "YO vowel sound",
    "ㅜ": "U vowel sound",
    "ㅝ": "WO vowel sound",
    "ㅞ": "WE vowel sound",
    "ㅟ": "WI vowel sound",
    "ㅠ": "YU vowel sound",
    "ㅡ": "EU vowel sound",
    "ㅢ": "UI vowel sound",
    "ㅣ": "I vowel sound",
}

# Hangul syllable decomposition (Unicode block AC00-D7A3)
_HANGUL_BASE = 0xAC00
_HANGUL_LAST = 0xD7A3
_INITIALS = "ㄱㄲㄴㄷㄸㄹㅁㅂㅃㅅㅆㅇㅈㅉㅊㅋㅌㅍㅎ"
_MEDIALS = "ㅏㅐㅑㅒㅓㅔㅕㅖㅗㅘㅙㅚㅛㅜㅝㅞㅟㅠㅡㅢㅣ"
_FINALS = (
    "", "ㄱ", "ㄲ", "ㄳ", "ㄴ", "ㄵ", "ㄶ", "ㄷ", "ㄹ", "ㄺ", "ㄻ", "ㄼ", "ㄽ", "ㄾ",
    "ㄿ", "ㅀ", "ㅁ", "ㅂ", "ㅄ", "ㅅ", "ㅆ", "ㅇ", "ㅈ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)

PHONEME_TABLES: dict[str, dict[str, str]] = {
    "english": ENGLISH,
    "mandarin": MANDARIN,
    "japanese": JAPANESE,
    "spanish": SPANISH,
    "korean": KOREAN_JAMO,
}


def table_for(language: str) -> dict[str, str]:
    """Phoneme table for a canonical language code (English by default)."""
    return PHONEME_TABLES.get(language, ENGLISH)


def is_hangul_syllable(char: str) -> bool:
    return _HANGUL_BASE <= ord(char) <= _HANGUL_LAST


def is_kana(char: str) -> bool:
    # Hiragana 3040-309F, Katakana 30A0-30FF
    return 0x3040 <= ord(char) <= 0x30FF


def decompose_hangul(syllable: str) -> tuple[str, ...]:
    """Split a precomposed Hangul syllable into its compatibility jamo."""
    index = ord(syllable) - _HANGUL_BASE
    initial = _INITIALS[index // 588]
    medial = _MEDIALS[(index % 588) // 28]
    final = _FINALS[index % 28]
    return tuple(j for j in (initial, medial, final) if j)


def describe_hangul(syllable: str) -> str:
    """Compose a description for a Hangul syllable from its jamo."""
    parts = [KOREAN_JAMO.get(jamo, UNKNOWN_SOUND) for jamo in decompose_hangul(syllable)]
    return " + ".join(parts)
