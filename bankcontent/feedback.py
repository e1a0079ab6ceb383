"""bankcontent.feedback

Customer feedback content table.

The engine decides *whether* a customer speaks up this week; this module
decides *what* they say. Selection is driven only by the Random it is given,
so a seeded turn always produces the same line.
"""

from __future__ import annotations

import random
from typing import Dict, List, Tuple

from bankcore.state import Sentiment, ServerStatus

FEEDBACK_TEXTS: Dict[Sentiment, List[str]] = {
    Sentiment.POSITIVE: [
        "Opening an account took five minutes. Impressed!",
        "The staff at my branch always remember my name.",
        "Great rates on my savings account this year.",
        "The mobile app makes paying bills painless.",
        "Got my loan approved faster than I expected.",
    ],
    Sentiment.NEUTRAL: [
        "Service is fine, nothing special.",
        "It would be nice to have longer branch hours.",
        "The ATM near my office is sometimes out of cash.",
        "Fees are about what I pay elsewhere.",
    ],
    Sentiment.NEGATIVE: [
        "I waited on hold for forty minutes.",
        "My deposit took three days to show up.",
        "The interest on my savings is barely worth it.",
        "Loan paperwork was confusing and slow.",
    ],
}

OVERLOAD_COMPLAINTS: List[str] = [
    "The app keeps timing out when I try to log in.",
    "Online banking has been painfully slow all week.",
]


def pick_sentiment(rng: random.Random, satisfaction: float) -> Sentiment:
    """Happier customer base -> more positive voices; the middle band stays neutral."""
    r = rng.random()
    positive_share = max(0.0, min(1.0, satisfaction / 100.0)) * 0.8
    negative_share = max(0.0, min(1.0, (100.0 - satisfaction) / 100.0)) * 0.8
    if r < positive_share:
        return Sentiment.POSITIVE
    if r >= 1.0 - negative_share:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def generate_feedback(
    rng: random.Random,
    *,
    satisfaction: float,
    server_status: ServerStatus,
) -> Tuple[Sentiment, str]:
    sentiment = pick_sentiment(rng, satisfaction)
    pool = list(FEEDBACK_TEXTS[sentiment])
    if sentiment is Sentiment.NEGATIVE and server_status is ServerStatus.OVERLOADED:
        pool = OVERLOAD_COMPLAINTS + pool
    return sentiment, rng.choice(pool)
