"""Shared constants for the NLU pipeline."""

from typing import Dict, NamedTuple


class Locale(NamedTuple):
    language: str = "english"
    dialect: str = "standard"


DEFAULT_LOCALE = Locale()

# Confidence contributed by each recognized slot. Sums to 1.0.
SLOT_WEIGHTS: Dict[str, float] = {
    "product": 0.3,
    "quantity": 0.3,
    "delivery": 0.2,
    "payment": 0.2,
}

# Mid-conversation turns scoring below this are re-asked, not guessed
CLARIFICATION_THRESHOLD = 0.5
CLARIFICATION_CONFIDENCE = 0.8

# Whole-utterance matches are unambiguous
WHOLE_UTTERANCE_CONFIDENCE = 1.0

# Spoken unit -> canonical unit
UNIT_ALIASES: Dict[str, str] = {
    "kg": "kg", "kgs": "kg", "kilo": "kg", "kilos": "kg",
    "kilogram": "kg", "kilograms": "kg",
    "g": "g", "gm": "g", "gms": "g", "gram": "g", "grams": "g",
    "ml": "ml", "millilitre": "ml", "millilitres": "ml",
    "milliliter": "ml", "milliliters": "ml",
    "l": "l", "ltr": "l", "ltrs": "l", "litre": "l", "litres": "l",
    "liter": "l", "liters": "l",
    "piece": "piece", "pieces": "piece", "pc": "piece", "pcs": "piece",
    "unit": "piece", "units": "piece", "no": "piece", "nos": "piece",
    "dozen": "dozen", "dozens": "dozen",
    "pack": "pack", "packs": "pack", "packet": "pack", "packets": "pack",
}

NUMBER_WORDS: Dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}
