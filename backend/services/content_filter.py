"""
Word-list content filter applied to review text before storage.
"""
import re
from typing import Iterable, Optional


STRICT_WORDS = (
    "fuck", "shit", "bitch", "asshole", "bastard", "cock", "dick", "pussy",
)

MODERATE_WORDS = (
    "idiot", "moron", "retard",
)


class ProfanityFilter:
    """
    Masks listed words with asterisks, keeping everything else untouched.

    Matching is case-insensitive, whole-word, and tolerant of stretched
    letters ("fuuuck"). Masked output contains no word characters where the
    match was, so cleaning already-cleaned text changes nothing.
    """

    def __init__(self, words: Optional[Iterable[str]] = None):
        self.words = tuple(words) if words is not None else STRICT_WORDS + MODERATE_WORDS
        self._pattern = self._compile(self.words)

    @staticmethod
    def _compile(words: Iterable[str]) -> Optional[re.Pattern]:
        alternatives = [
            "".join(f"{re.escape(char)}+" for char in word)
            for word in sorted(set(w.lower() for w in words if w), key=len, reverse=True)
        ]
        if not alternatives:
            return None
        return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE)

    def clean(self, text: Optional[str]) -> Optional[str]:
        if not text or self._pattern is None:
            return text
        return self._pattern.sub(lambda match: "*" * len(match.group(0)), text)

    def contains_profanity(self, text: Optional[str]) -> bool:
        if not text or self._pattern is None:
            return False
        return self._pattern.search(text) is not None


profanity_filter = ProfanityFilter()
