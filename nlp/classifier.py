"""
Mention Classifiers

A classifier is any callable `classify(text) -> (sentiment, score, topics)`.
The ingestion path receives one explicitly, so tests can pass a fixed
function and production can plug in a model-backed implementation.

LexiconClassifier is the default: the mean valence of the words of a text,
looked up in a small AFINN-style lexicon (-5..5), labelled positive above
0.1 and negative below -0.1.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .preprocess import DEFAULT_SOCIAL_SLANG, TextPreprocessor, extract_topics

Classification = Tuple[str, float, List[str]]
Classifier = Callable[[str], Classification]

POSITIVE_THRESHOLD = 0.1
NEGATIVE_THRESHOLD = -0.1

DEFAULT_LEXICON: Dict[str, int] = {
    # positive
    "love": 3,
    "loved": 3,
    "amazing": 4,
    "awesome": 4,
    "fantastic": 4,
    "incredible": 4,
    "excellent": 3,
    "great": 3,
    "good": 3,
    "best": 3,
    "happy": 3,
    "recommend": 2,
    "quality": 2,
    "favorite": 2,
    "thanks": 2,
    "helpful": 2,
    "nice": 3,
    "impressed": 3,
    "innovative": 2,
    "fast": 2,
    "reliable": 2,
    "satisfied": 2,
    "like": 2,
    "interesting": 2,
    "promising": 2,
    "win": 4,
    # negative
    "bad": -3,
    "terrible": -3,
    "awful": -3,
    "horrible": -3,
    "worst": -3,
    "hate": -3,
    "disappointed": -2,
    "disappointing": -2,
    "unhelpful": -2,
    "slow": -2,
    "broken": -1,
    "issues": -1,
    "problem": -2,
    "problems": -2,
    "expensive": -2,
    "scam": -4,
    "poor": -2,
    "refund": -2,
    "angry": -3,
    "fail": -2,
    "failed": -2,
    "mediocre": -1,
    "avoid": -1,
    "unsatisfied": -2,
    "not": -1,
}


@dataclass
class LexiconClassifier:
    """Lexicon-based sentiment scoring with simple topic extraction."""

    lexicon: Optional[Dict[str, int]] = None
    max_topics: int = 5
    preprocessor: Optional[TextPreprocessor] = None

    def __post_init__(self):
        if self.lexicon is None:
            self.lexicon = dict(DEFAULT_LEXICON)
        if self.preprocessor is None:
            self.preprocessor = TextPreprocessor(slang_dict=DEFAULT_SOCIAL_SLANG)

    def score(self, text: str) -> float:
        """Mean lexicon valence over all words; 0 for empty text."""
        tokens = self.preprocessor.tokenize(text)
        if not tokens:
            return 0.0
        return sum(self.lexicon.get(token, 0) for token in tokens) / len(tokens)

    def __call__(self, text: str) -> Classification:
        score = self.score(text)
        if score > POSITIVE_THRESHOLD:
            sentiment = "positive"
        elif score < NEGATIVE_THRESHOLD:
            sentiment = "negative"
        else:
            sentiment = "neutral"

        topics = extract_topics(text, self.max_topics, self.preprocessor)
        return sentiment, score, topics


def classify(text: str) -> Classification:
    """Classify text with the default lexicon classifier."""
    return LexiconClassifier()(text)
