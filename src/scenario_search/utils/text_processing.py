"""Text processing utilities for queries and scenario content."""

import re
from typing import Iterable, List, Optional, Pattern


class TextProcessor:
    """Tokenization and matching helpers shared by the search components."""

    def __init__(self):
        """Initialize text processor patterns."""
        self.whitespace_pattern = re.compile(r'\s+')

    def clean_text(self, text: str) -> str:
        """
        Normalize text for matching.

        Args:
            text: Raw text content

        Returns:
            Lower-cased text with collapsed whitespace
        """
        if not text:
            return ""
        return self.whitespace_pattern.sub(' ', text.lower()).strip()

    def tokenize(self, text: str) -> List[str]:
        """
        Split a query into lower-cased, de-duplicated whitespace tokens.

        Order of first appearance is preserved so downstream scoring and
        highlighting are deterministic.
        """
        if not text:
            return []
        seen = set()
        tokens = []
        for token in text.lower().split():
            if token not in seen:
                seen.add(token)
                tokens.append(token)
        return tokens

    def matching_tokens(self, tokens: Iterable[str], text: str) -> List[str]:
        """Tokens that occur as substrings of ``text`` (case-insensitive)."""
        text_lower = text.lower() if text else ""
        if not text_lower:
            return []
        return [token for token in tokens if token in text_lower]

    def matching_tokens_any(self, tokens: Iterable[str], texts: Iterable[str]) -> List[str]:
        """Tokens that occur as substrings of at least one of ``texts``."""
        lowered = [t.lower() for t in texts if t]
        return [token for token in tokens if any(token in t for t in lowered)]

    def build_token_pattern(self, tokens: Iterable[str]) -> Optional[Pattern[str]]:
        """
        Compile one case-insensitive alternation for all tokens.

        Longer tokens come first so overlapping tokens mark the longest span.
        """
        unique = sorted({t for t in tokens if t}, key=lambda t: (-len(t), t))
        if not unique:
            return None
        return re.compile("(" + "|".join(re.escape(t) for t in unique) + ")", re.IGNORECASE)

    def starts_word(self, text: str, fragment: str) -> bool:
        """Whether ``fragment`` begins any word of ``text``."""
        if not fragment:
            return False
        return re.search(r'(?:^|\W)' + re.escape(fragment.lower()), text.lower()) is not None
