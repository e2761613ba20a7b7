"""
Per-language word lists for confirmation and general commands.

Matching works on a normalized utterance (lowercased, punctuation including
the danda replaced by spaces, whitespace collapsed). Indic vowel signs are not
word characters for `re`, so containment checks pad with spaces instead of
relying on word boundaries.

Languages without an entry use the English lists. English yes-words are
accepted for every language since code-mixed speech ("yes, theek hai") is
common.
"""

import re
from typing import Dict, List, Optional

from ..schemas.commands import ConfirmationType, GeneralType
from .constants import Locale

ENGLISH = "english"

CONFIRMATION_LEXICON: Dict[str, Dict[str, List[str]]] = {
    "english": {
        "yes": ["yes", "yeah", "yep", "yup", "sure", "okay", "ok", "correct",
                "right", "confirm", "confirmed", "go ahead", "absolutely",
                "of course", "that's right", "that is correct"],
        "no": ["no", "nope", "nah", "wrong", "incorrect", "not now",
               "not right", "not correct", "don't", "do not"],
        "maybe": ["maybe", "perhaps", "not sure", "i'm not sure", "let me think"],
    },
    "hindi": {
        "yes": ["हाँ", "हां", "जी हाँ", "जी हां", "बिलकुल", "बिल्कुल", "ठीक है",
                "सही है", "haan", "han", "ji haan", "bilkul", "theek hai", "thik hai",
                "sahi hai"],
        "no": ["नहीं", "नही", "ना", "मत करो", "nahi", "nahin", "mat karo"],
        "maybe": ["शायद", "पता नहीं", "shayad", "pata nahi"],
    },
    "tamil": {
        "yes": ["ஆம்", "ஆமாம்", "சரி", "aam", "aamam", "sari"],
        "no": ["இல்லை", "வேண்டாம்", "illai", "vendam"],
        "maybe": ["ஒருவேளை", "oruvelai"],
    },
    "kannada": {
        "yes": ["ಹೌದು", "ಸರಿ", "houdu", "sari"],
        "no": ["ಇಲ್ಲ", "ಬೇಡ", "illa", "beda"],
        "maybe": ["ಇರಬಹುದು", "irabahudu"],
    },
    "bengali": {
        "yes": ["হ্যাঁ", "হ্যা", "ঠিক আছে", "hyan", "thik ache"],
        "no": ["না", "na"],
        "maybe": ["হয়তো", "hoyto"],
    },
    "marathi": {
        "yes": ["हो", "होय", "बरोबर", "ho", "hoy", "barobar"],
        "no": ["नाही", "nahi"],
        "maybe": ["कदाचित", "kadachit"],
    },
    "gujarati": {
        "yes": ["હા", "બરાબર", "ha", "barabar"],
        "no": ["ના", "નહીં", "na", "nahi"],
        "maybe": ["કદાચ", "kadach"],
    },
}

# Extra words heard in colloquial speech, added on top of the standard lists
COLLOQUIAL_EXTRAS: Dict[str, Dict[str, List[str]]] = {
    "english": {"yes": ["yea", "ya", "alright", "sounds good"], "no": ["nahh"]},
    "hindi": {"yes": ["हाँ जी", "हम्म", "haan ji", "hmm", "chalega"], "no": ["nai", "na na"]},
    "tamil": {"yes": ["ஆமா", "aama", "seri"], "no": ["venda"]},
    "kannada": {"yes": ["ಹೂಂ", "hoon"], "no": ["beda bidi"]},
    "bengali": {"yes": ["হুম", "ha"], "no": ["na na"]},
    "marathi": {"yes": ["हां", "haan"], "no": ["nako"]},
    "gujarati": {"yes": ["હાં", "haan"], "no": ["nai"]},
}

GENERAL_LEXICON: Dict[str, Dict[str, List[str]]] = {
    "english": {
        "help": ["help", "help me", "i need help", "what can i say",
                 "what can you do", "how does this work", "how do i order"],
        "cancel": ["cancel", "cancel it", "cancel order", "cancel the order",
                   "cancel my order", "cancel that", "stop", "abort",
                   "never mind", "nevermind", "forget it"],
        "repeat": ["repeat", "repeat that", "say again", "say that again",
                   "come again", "pardon", "what did you say"],
    },
    "hindi": {
        "help": ["मदद", "मदद करो", "madad", "madad karo"],
        "cancel": ["रद्द करो", "रहने दो", "cancel karo", "rehne do"],
        "repeat": ["फिर से बोलो", "दोबारा बोलो", "phir se bolo", "dobara bolo"],
    },
}

_PUNCTUATION = re.compile(r"[,.!?;:।॥\"()]+")
_TRAILING_POLITENESS = re.compile(
    r"(?:\s+(?:please|pls|plz|thanks|thank you|thankyou|kindly))+$"
)
_LEADING_POLITENESS = re.compile(r"^(?:please|kindly|pls|plz)\s+")


def normalize(utterance: str) -> str:
    """Lowercase, replace punctuation with spaces, collapse whitespace."""
    text = _PUNCTUATION.sub(" ", (utterance or "").lower())
    return " ".join(text.split())


def normalize_whole(utterance: str) -> str:
    """Normalize and drop leading/trailing politeness words."""
    text = normalize(utterance)
    text = _TRAILING_POLITENESS.sub("", text)
    text = _LEADING_POLITENESS.sub("", text)
    return text.strip()


def words_for(language: str, dialect: str, kind: str) -> List[str]:
    """Word list for one confirmation kind, English fallback included."""
    entry = CONFIRMATION_LEXICON.get(language) or CONFIRMATION_LEXICON[ENGLISH]
    words = list(entry.get(kind, []))
    if dialect == "colloquial":
        words += COLLOQUIAL_EXTRAS.get(language, {}).get(kind, [])
    if language != ENGLISH:
        words += CONFIRMATION_LEXICON[ENGLISH][kind]
    return words


def _contains(text: str, phrase: str) -> bool:
    return f" {phrase} " in f" {text} "


def match_confirmation(utterance: str, locale: Locale) -> Optional[ConfirmationType]:
    """Whole-utterance confirmation match, or None."""
    text = normalize_whole(utterance)
    if not text:
        return None
    # maybe before no: "पता नहीं" contains a no-word
    for kind in (ConfirmationType.MAYBE, ConfirmationType.NO, ConfirmationType.YES):
        if text in words_for(locale.language, locale.dialect, kind.value):
            return kind
    return None


def match_general(utterance: str, locale: Locale) -> Optional[GeneralType]:
    """Whole-utterance help/cancel/repeat match, or None."""
    text = normalize_whole(utterance)
    if not text:
        return None
    for kind in GeneralType:
        phrases = list(GENERAL_LEXICON[ENGLISH][kind.value])
        phrases += GENERAL_LEXICON.get(locale.language, {}).get(kind.value, [])
        if text in phrases:
            return kind
    return None


def is_affirmative(utterance: str, language: str, dialect: str = "standard") -> bool:
    """
    True if the utterance says yes in the given language (or English).

    Unlike `match_confirmation` this is a containment check, so
    "haan, order kar do" counts. Any no-word or maybe-phrase vetoes the match.
    """
    text = normalize_whole(utterance)
    if not text:
        return False
    if any(_contains(text, word) for word in words_for(language, dialect, "no")):
        return False
    if any(_contains(text, word) for word in words_for(language, dialect, "maybe")):
        return False
    return any(_contains(text, word) for word in words_for(language, dialect, "yes"))
