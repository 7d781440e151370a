"""
Shared Domain Constants.

Central location for the thresholds used by recording, transcription and
scoring. All timing values are in milliseconds unless the name says otherwise.
"""

# =============================================================================
# Recording
# =============================================================================

MIN_RECORDING_DURATION_MS = 500  # Shorter recordings never reach transcription
RECORDER_BITS_PER_SECOND = 16000  # Azure prefers 16kHz speech


# =============================================================================
# Transcription
# =============================================================================

LOCAL_FALLBACK_TIMEOUT_SECONDS = 10.0  # Hard stop for the in-process recognizer
PROBE_AUDIO_DURATION_MS = 100  # Silent clip used for endpoint discovery


# =============================================================================
# Scoring Thresholds
# =============================================================================
# Product-tuned values. Keep them as-is; ScoringConfig can override per call.

SIMILARITY_THRESHOLD = 0.85  # Word counts as said above this similarity
WORD_MATCH_FLOOR = 0.5  # Below this ratio the attempt lands in the low band
LOW_BAND_CEILING = 10  # Low band is [0, 10)
BEGINNER_JITTER = 10  # +/- points on the beginner overall score
SENTENCE_JITTER = 15  # +/- points on intermediate/advanced overall score

# Phoneme score ranges (inclusive lower, exclusive upper)
PHONEME_SAID_RANGE = (50, 100)
PHONEME_MISSED_RANGE = (0, 20)

# Metric offsets applied to the similarity base score per level
LEVEL_METRIC_OFFSETS: dict[str, dict[str, int]] = {
    "intermediate": {"pronunciation": 0, "fluency": -3, "prosody": -4},
    "advanced": {"pronunciation": -2, "fluency": -5, "prosody": -8},
}


# =============================================================================
# Pronunciation Variants
# =============================================================================
# Common learner renderings and recognizer misspellings, keyed by target word.

PRONUNCIATION_VARIANTS: dict[str, tuple[str, ...]] = {
    "i": ("ai", "ay"),
    "don't": ("dont", "dun"),
    "understand": ("understan", "understend"),
    "hello": ("helo", "hallo"),
    "goodbye": ("goodby", "good-bye"),
    "thank": ("tank", "thang"),
    "you": ("yu", "u"),
    "please": ("pleez", "pleas"),
    "sorry": ("soree", "sori"),
    "excuse": ("excus", "exkuse"),
    "me": ("mi",),
    "yes": ("yeah", "ya"),
    "no": ("nope", "nah"),
    "what": ("wut", "wat"),
    "where": ("wear", "ware"),
    "when": ("wen",),
    "why": ("wy",),
    "who": ("hoo",),
    "which": ("wich",),
    "that": ("dat",),
    "this": ("dis",),
    "the": ("da", "duh"),
    "a": ("uh",),
    "an": ("un",),
    "is": ("iz",),
    "are": ("r", "ar"),
    "am": ("m",),
    "was": ("wuz",),
    "were": ("wer",),
    "have": ("hav", "haf"),
    "has": ("haz",),
    "had": ("hade",),
    "do": ("du",),
    "does": ("duz",),
    "can": ("kan",),
    "could": ("kud",),
    "would": ("wud",),
    "should": ("shud",),
    "will": ("wil",),
    "might": ("mite",),
    "must": ("mus",),
    "shall": ("shal",),
    "want": ("wont",),
    "need": ("nead",),
    "like": ("lik",),
    "love": ("luv",),
    "know": ("no",),
    "think": ("tink",),
    "feel": ("fel",),
    "see": ("sea",),
    "look": ("luk",),
    "hear": ("here",),
    "listen": ("lisen",),
    "speak": ("spek",),
    "talk": ("tok",),
    "say": ("sai",),
    "tell": ("tel",),
    "answer": ("anser",),
    "question": ("kwestion",),
    "problem": ("problum",),
    "solution": ("solushun",),
    "work": ("werk",),
    "study": ("studi",),
    "learn": ("lern",),
    "teach": ("teech",),
    "school": ("skool",),
    "home": ("hom",),
    "house": ("hous",),
    "room": ("rum",),
    "door": ("dor",),
    "window": ("windo",),
    "table": ("taybl",),
    "chair": ("chayr",),
    "food": ("fud",),
    "water": ("wata",),
    "eat": ("eet",),
    "cook": ("kuk",),
    "buy": ("by",),
    "sell": ("sel",),
    "money": ("muni",),
    "i'm": ("im",),
    "not": ("nawt", "nat"),
    "sure": ("shur", "shure"),
    "time": ("tym",),
    "night": ("nyt",),
    "morning": ("mornin",),
    "afternoon": ("aftanoon",),
    "evening": ("evenin",),
    "today": ("tuday",),
    "tomorrow": ("tumoro",),
    "yesterday": ("yestaday",),
    "month": ("munth",),
    "year": ("yeer",),
    "hour": ("our",),
    "minute": ("minit",),
    "second": ("sekund",),
}


# =============================================================================
# Feedback Messages (Single Source of Truth)
# =============================================================================


class FeedbackMessages:
    """Centralized user-facing messages for the assessment flow."""

    # Recording problems
    PERMISSION_DENIED = "Microphone access was denied. Allow microphone access and try again."
    RECORDING_TOO_SHORT = (
        "Recording too short. Please hold the microphone button for at least "
        "half a second and speak clearly."
    )
    EMPTY_RECORDING = "No audio data recorded. Please try again."
    RECORDING_IN_PROGRESS = "A recording is already in progress."

    # Transcription problems
    NO_SPEECH = "No speech detected. Try speaking louder and more clearly, or check your microphone."
    NO_SPEECH_WEBM = (
        "The audio was recorded but no speech was found. Try speaking louder and "
        "more clearly, or use Chrome/Edge for better compatibility."
    )
    TRANSCRIPTION_FAILED = (
        "Speech recognition failed. Please try again or check your microphone "
        "and browser compatibility."
    )
    NOT_CONFIGURED = "Speech service is not configured. Please check your credentials."

    # Per-phoneme feedback
    PHONEME_EXCELLENT = "Excellent pronunciation!"
    PHONEME_GOOD = "Good pronunciation"
    PHONEME_FAIR = "Fair pronunciation"
    PHONEME_NEEDS_WORK = "Needs improvement"
    PHONEME_PRACTICE = "Practice more"

    @classmethod
    def for_phoneme_score(cls, score: int) -> str:
        """Get feedback label for a phoneme score (0-100)."""
        if score >= 90:
            return cls.PHONEME_EXCELLENT
        if score >= 80:
            return cls.PHONEME_GOOD
        if score >= 70:
            return cls.PHONEME_FAIR
        if score >= 60:
            return cls.PHONEME_NEEDS_WORK
        return cls.PHONEME_PRACTICE
