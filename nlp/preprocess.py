"""
Text Preprocessing Utilities for Mention Classification

Provides text cleaning and normalization for social posts, news and forum
items before sentiment scoring and topic extraction.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Words never treated as topics
STOP_WORDS = frozenset(
    ["the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"]
)


class TextPreprocessor:
    """Text preprocessing pipeline for brand mentions."""

    def __init__(
        self,
        slang_dict_path: Optional[Path] = None,
        slang_dict: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the preprocessor with an optional slang dictionary.

        Args:
            slang_dict_path: Path to JSON file containing slang mappings
            slang_dict: Slang mappings to use when no file is given
        """
        self.slang_dict = self._load_slang_dict(slang_dict_path) or dict(slang_dict or {})

        # Compile regex patterns for efficiency
        self.url_pattern = re.compile(r"https?://\S+|www\.\S+")
        self.emoji_pattern = re.compile(
            r"[\U0001F600-\U0001F64F]|[\U0001F300-\U0001F5FF]|[\U0001F680-\U0001F6FF]|"
            r"[\U0001F1E0-\U0001F1FF]|[\U00002500-\U00002BEF]|[\U00002702-\U000027B0]|"
            r"[\U0001f926-\U0001f937]|[\U00010000-\U0010ffff]|"
            r"[\u2640-\u2642]|[\u2600-\u2B55]|[\u200d]|[\u23cf]|[\u23e9]|[\u231a]"
        )
        self.mention_pattern = re.compile(r"[@#](\w+)")
        self.punctuation_pattern = re.compile(r"[^\w\s]")
        self.extra_whitespace_pattern = re.compile(r"\s+")

    def _load_slang_dict(self, path: Optional[Path]) -> Dict[str, str]:
        """Load slang dictionary from JSON file."""
        if path and path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load slang dictionary from {path}: {e}")
                return {}
        return {}

    def clean_text(self, text: str) -> str:
        """
        Text cleaning pipeline.

        Args:
            text: Raw text to clean

        Returns:
            Cleaned and normalized text
        """
        if not text or not text.strip():
            return ""

        text = self.remove_urls(text)
        text = self.remove_emojis(text)
        # Keep the word of @handles and #hashtags
        text = self.mention_pattern.sub(r"\1", text)
        text = text.lower()
        text = self.replace_slang(text)
        text = self.remove_punctuation(text)
        text = self.normalize_whitespace(text)

        return text.strip()

    def tokenize(self, text: str) -> List[str]:
        """Clean text and split it into words."""
        cleaned = self.clean_text(text)
        return cleaned.split() if cleaned else []

    def remove_urls(self, text: str) -> str:
        """Remove URLs from text."""
        return self.url_pattern.sub("", text)

    def remove_emojis(self, text: str) -> str:
        """Remove emojis and emoticons from text."""
        return self.emoji_pattern.sub("", text)

    def remove_punctuation(self, text: str) -> str:
        """Remove punctuation while preserving spaces and word characters."""
        return self.punctuation_pattern.sub(" ", text)

    def normalize_whitespace(self, text: str) -> str:
        """Normalize multiple whitespace characters to single spaces."""
        return self.extra_whitespace_pattern.sub(" ", text)

    def replace_slang(self, text: str) -> str:
        """Replace slang terms with canonical forms using the loaded dictionary."""
        if not self.slang_dict:
            return text

        return " ".join(self.slang_dict.get(word, word) for word in text.split())


def clean_text(text: str, slang_dict_path: Optional[Path] = None) -> str:
    """Convenience function for text preprocessing."""
    preprocessor = TextPreprocessor(slang_dict_path)
    return preprocessor.clean_text(text)


def extract_topics(
    text: str, max_topics: int = 5, preprocessor: Optional[TextPreprocessor] = None
) -> List[str]:
    """
    Pick topic tags from mention text.

    Unique words longer than three characters that are not stop words, in
    order of first appearance, at most `max_topics`.
    """
    preprocessor = preprocessor or TextPreprocessor()
    topics: List[str] = []
    for word in preprocessor.tokenize(text):
        if len(word) > 3 and word not in STOP_WORDS and word not in topics:
            topics.append(word)
            if len(topics) == max_topics:
                break
    return topics


# Default slang dictionary for social media text
DEFAULT_SOCIAL_SLANG = {
    "luv": "love",
    "gr8": "great",
    "thx": "thanks",
    "pls": "please",
    "plz": "please",
    "awsm": "awesome",
    "srsly": "seriously",
    "bc": "because",
    "cuz": "because",
    "tho": "though",
    "imo": "in my opinion",
    "smh": "disappointed",
    "meh": "mediocre",
    "fav": "favorite",
    "fave": "favorite",
}
