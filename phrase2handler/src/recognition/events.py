"""
Phrase Recognition Events

The data a speech engine hands over when a grammar matches an utterance.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List

from ..binding.result import SemanticMeaning


class ConfidenceLevel(Enum):
    """Engine confidence in a recognized phrase."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    REJECTED = "rejected"


@dataclass
class PhraseRecognizedEvent:
    """
    A recognized phrase and its semantic meanings.

    Attributes:
        text: Recognized text
        semantic_meanings: Semantic key/value groups in recognizer order
        confidence: Engine confidence
        phrase_duration: How long the phrase took to say
        phrase_start_time: When the phrase started
    """
    text: str
    semantic_meanings: List[SemanticMeaning] = field(default_factory=list)
    confidence: ConfidenceLevel = ConfidenceLevel.HIGH
    phrase_duration: timedelta = timedelta(0)
    phrase_start_time: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return (
            f"Confidence={self.confidence.value},duration={self.phrase_duration},"
            f"startTime={self.phrase_start_time.isoformat()},text={self.text}"
        )
