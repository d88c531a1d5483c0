"""
Mention Ingestion

Classifies incoming mention payloads, appends them to the mention store and
announces each new mention on the broadcast channel. The classifier and the
broadcaster are passed in explicitly.
"""

import abc
import logging
import random
from abc import ABCMeta
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from nlp.classifier import Classifier, LexiconClassifier

from .errors import ValidationError
from .models import Engagement, Mention, Sentiment, Source, ensure_utc, utc_now

logger = logging.getLogger(__name__)

NEW_MENTION_EVENT = "newMention"


class Broadcaster(metaclass=ABCMeta):
    """Real-time push channel for dashboard clients."""

    @abc.abstractmethod
    def publish(self, event: str, payload: Dict[str, Any]) -> None:
        """Send an event to connected clients."""
        pass


class LoggingBroadcaster(Broadcaster):
    """Broadcaster that only logs events; used when no push channel is wired."""

    def publish(self, event: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Broadcast {event}: {payload.get('brandName')} {payload.get('id')}")


def publish_safely(broadcaster: Broadcaster, event: str, payload: Dict[str, Any]) -> bool:
    """Fire-and-forget publish; failures are logged and never raised."""
    try:
        broadcaster.publish(event, payload)
        return True
    except Exception as e:
        logger.warning(f"Failed to broadcast {event}: {e}")
        return False


class MentionIngestor:
    """Turns raw mention payloads into stored, classified mentions."""

    def __init__(
        self,
        store,
        classifier: Optional[Classifier] = None,
        broadcaster: Optional[Broadcaster] = None,
    ):
        """
        Args:
            store: MentionStore to append to
            classifier: Callable text -> (sentiment, score, topics)
            broadcaster: Push channel for new mentions
        """
        self.store = store
        self.classifier = classifier or LexiconClassifier()
        self.broadcaster = broadcaster or LoggingBroadcaster()

    def build_mention(self, payload: Dict[str, Any]) -> Mention:
        """
        Validate and classify a payload without storing it.

        Accepts the dashboard's field names (brandName, source, content,
        author, url, engagement{likes, shares, comments}, timestamp).
        """
        brand = payload.get("brandName")
        content = payload.get("content")
        if not brand:
            raise ValidationError("Brand name is required")
        if not content or not str(content).strip():
            raise ValidationError("Mention content is required")

        sentiment, score, topics = self.classifier(content)

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return Mention(
            brand=brand,
            source=Source.parse(payload.get("source")),
            content=content,
            timestamp=ensure_utc(timestamp) if timestamp else utc_now(),
            sentiment=Sentiment.parse(sentiment),
            sentiment_score=float(score),
            topics=tuple(topics),
            engagement=Engagement.from_dict(payload.get("engagement")),
            author=payload.get("author"),
            url=payload.get("url"),
            location=payload.get("location"),
            language=payload.get("language"),
        )

    def ingest(self, payload: Dict[str, Any]) -> Mention:
        """
        Classify, store and broadcast one mention.

        Raises:
            ValidationError: Missing brand/content, unknown source or brand
            QueryError: If the store cannot be written
        """
        mention = self.store.add_mention(self.build_mention(payload))
        publish_safely(self.broadcaster, NEW_MENTION_EVENT, mention.to_dict())
        return mention

    def store_mention(self, mention: Mention) -> Mention:
        """Store an already classified mention and broadcast it."""
        stored = self.store.add_mention(mention)
        publish_safely(self.broadcaster, NEW_MENTION_EVENT, stored.to_dict())
        return stored

    def simulate(
        self, brand: str, count: int = 10, seed: Optional[int] = None, days_back: int = 7
    ) -> List[Mention]:
        """Store `count` randomly generated mentions for a brand."""
        return [
            self.store_mention(mention)
            for mention in generate_simulated_mentions(brand, count, seed, days_back)
        ]


SIMULATED_TOPICS = [
    "product",
    "service",
    "customer support",
    "price",
    "quality",
    "delivery",
    "innovation",
]

SIMULATED_PHRASES = {
    Sentiment.POSITIVE: [
        "Love the new {brand} product! Amazing quality and great service.",
        "Just experienced {brand}'s customer support - absolutely fantastic!",
        "The {brand} team is doing incredible work in the industry.",
        "Highly recommend {brand} for anyone looking for quality services.",
    ],
    Sentiment.NEGATIVE: [
        "Disappointed with {brand}'s recent service. Expected better.",
        "Having issues with {brand} product quality lately.",
        "{brand} customer support was unhelpful and slow to respond.",
        "Not satisfied with {brand}'s pricing strategy.",
    ],
    Sentiment.NEUTRAL: [
        "Saw {brand} mentioned in the news today.",
        "Reading about {brand}'s new initiatives.",
        "Came across {brand} while researching solutions.",
        "Interesting discussion about {brand} in the forum.",
    ],
}

SIMULATED_SCORES = {
    Sentiment.POSITIVE: 0.8,
    Sentiment.NEGATIVE: -0.7,
    Sentiment.NEUTRAL: 0.0,
}


def generate_simulated_mentions(
    brand: str,
    count: int = 10,
    seed: Optional[int] = None,
    days_back: int = 7,
    now: Optional[datetime] = None,
) -> List[Mention]:
    """
    Random but plausible mentions spread over the last `days_back` days.

    Passing a seed makes the output reproducible.
    """
    if count < 0:
        raise ValidationError(f"Mention count must not be negative, got {count}")

    rng = random.Random(seed)
    now = ensure_utc(now) if now else utc_now()
    sources = list(Source)
    sentiments = list(Sentiment)

    mentions = []
    for _ in range(count):
        source = rng.choice(sources)
        sentiment = rng.choice(sentiments)
        mentions.append(
            Mention(
                brand=brand,
                source=source,
                content=rng.choice(SIMULATED_PHRASES[sentiment]).format(brand=brand),
                timestamp=now - timedelta(seconds=rng.random() * days_back * 86400),
                sentiment=sentiment,
                sentiment_score=SIMULATED_SCORES[sentiment],
                topics=(rng.choice(SIMULATED_TOPICS),),
                engagement=Engagement(
                    likes=rng.randrange(100),
                    shares=rng.randrange(50),
                    comments=rng.randrange(30),
                ),
                author=f"user{rng.randrange(1000)}",
                url=f"https://{source.value}.com/post/{rng.getrandbits(40):x}",
            )
        )
    return mentions
