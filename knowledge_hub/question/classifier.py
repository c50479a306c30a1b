"""Rule-based question classification."""

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from .lexicon import (
    DEFAULT_TYPE_PRIORITY,
    ENTITY_PATTERNS,
    GENERAL_TOPIC,
    INTENT_PATTERNS,
    QUESTION_TYPE_PATTERNS,
    SERVICE_TOPICS,
    SERVICES,
    TYPE_INTENTS,
    TYPE_TOPICS,
    ServiceEntry,
)
from .models import (
    ExtractedEntity,
    QuestionAnalysis,
    QuestionComplexity,
    QuestionIntent,
    QuestionType,
    ServiceReference,
)

logger = logging.getLogger(__name__)

FULL_NAME_CONFIDENCE = 0.95
NAME_CONFIDENCE = 0.85
CODE_CONFIDENCE = 0.7

CONTEXT_WINDOW = 30


class ClassifierConfig(BaseModel):
    """Configuration for the question classifier."""

    simple_token_threshold: int = 12
    complex_token_threshold: int = 40
    type_priority: list[QuestionType] = Field(default_factory=lambda: list(DEFAULT_TYPE_PRIORITY))
    service_weight: float = 0.5
    type_weight: float = 0.5
    type_score_saturation: int = 2


def _build_service_terms() -> list[tuple[str, ServiceEntry, float]]:
    """Map every lexicon spelling to its service and match specificity."""
    terms: dict[str, tuple[ServiceEntry, float]] = {}
    for service in SERVICES:
        candidates = [(service.full_name, FULL_NAME_CONFIDENCE)]
        if " " in service.short_full_name and service.short_full_name.lower() != service.name.lower():
            candidates.append((service.short_full_name, FULL_NAME_CONFIDENCE))
        candidates.append((service.name, NAME_CONFIDENCE))
        candidates.extend((alias, NAME_CONFIDENCE) for alias in service.aliases)
        candidates.append((service.code, CODE_CONFIDENCE))
        for term, confidence in candidates:
            key = term.lower()
            if key not in terms or terms[key][1] < confidence:
                terms[key] = (service, confidence)
    return sorted(
        ((term, service, confidence) for term, (service, confidence) in terms.items()),
        key=lambda item: len(item[0]),
        reverse=True,
    )


_SERVICE_TERMS = _build_service_terms()
_SERVICE_LOOKUP = {term: (service, confidence) for term, service, confidence in _SERVICE_TERMS}
_SERVICE_PATTERN = re.compile(
    r"(?<![\w-])(?:"
    + "|".join(re.escape(term).replace(r"\ ", r"\s+") for term, _, _ in _SERVICE_TERMS)
    + r")(?![\w-])",
    re.IGNORECASE,
)
_TYPE_PATTERNS = {
    question_type: [re.compile(pattern, re.IGNORECASE) for pattern in patterns]
    for question_type, patterns in QUESTION_TYPE_PATTERNS.items()
}
_INTENT_PATTERNS = [(re.compile(pattern, re.IGNORECASE), intent) for pattern, intent in INTENT_PATTERNS]
_ENTITY_PATTERNS = [
    (entity_type, re.compile(pattern, re.IGNORECASE), confidence)
    for entity_type, pattern, confidence in ENTITY_PATTERNS
]
_TOKEN_PATTERN = re.compile(r"\S+")


class QuestionClassifier:
    """Extracts services, type, complexity and topics from a normalized question."""

    def __init__(self, config: ClassifierConfig | None = None, **kwargs: Any) -> None:
        self.config = config or ClassifierConfig(**kwargs)
        # Types missing from a configured order rank after it, in default order
        ordered = list(dict.fromkeys(self.config.type_priority))
        ordered.extend(t for t in DEFAULT_TYPE_PRIORITY if t not in ordered)
        self._priority = {question_type: index for index, question_type in enumerate(ordered)}

    def analyze(self, normalized_text: str) -> QuestionAnalysis:
        """Analyze a normalized question.

        Args:
            normalized_text: Output of the normalizer

        Returns:
            QuestionAnalysis; low-confidence generic output when no signal is found
        """
        text = normalized_text or ""
        services = self.extract_services(text)
        question_type, type_scores = self.classify_type(text)
        complexity = self.assess_complexity(text, services)
        topics = self.suggest_topics(question_type, services)

        best_score = type_scores.get(question_type.value, 0)
        confidence = self._confidence(services, best_score)

        analysis = QuestionAnalysis(
            question_type=question_type,
            complexity=complexity,
            intent=self.detect_intent(text, question_type),
            aws_services=services,
            entities=self.extract_entities(text),
            confidence=confidence,
            suggested_topics=topics,
            type_scores=type_scores,
        )
        logger.debug(
            f"Analyzed question: type={question_type.value} complexity={complexity.value} "
            f"services={analysis.service_names} confidence={confidence:.2f}"
        )
        return analysis

    def extract_services(self, text: str) -> list[ServiceReference]:
        """Find AWS services mentioned in the text.

        Hits on the same service are merged, keeping the highest confidence
        and every distinct context window.
        """
        merged: dict[str, dict[str, Any]] = {}
        for match in _SERVICE_PATTERN.finditer(text):
            key = re.sub(r"\s+", " ", match.group(0).lower())
            service, confidence = _SERVICE_LOOKUP[key]
            window = text[max(0, match.start() - CONTEXT_WINDOW): match.end() + CONTEXT_WINDOW].strip()

            hit = merged.setdefault(
                service.name,
                {"service": service, "confidence": confidence, "contexts": [], "position": match.start()},
            )
            hit["confidence"] = max(hit["confidence"], confidence)
            if window not in hit["contexts"]:
                hit["contexts"].append(window)

        hits = sorted(merged.values(), key=lambda hit: (-hit["confidence"], hit["position"]))
        return [
            ServiceReference(
                service_name=hit["service"].name,
                service_code=hit["service"].code,
                category=hit["service"].category,
                confidence=hit["confidence"],
                context=" ... ".join(hit["contexts"]),
            )
            for hit in hits
        ]

    def classify_type(self, text: str) -> tuple[QuestionType, dict[str, int]]:
        """Score every question type and pick the winner.

        Returns:
            The winning type and the raw score of every type
        """
        scores = {
            question_type.value: sum(1 for pattern in patterns if pattern.search(text))
            for question_type, patterns in _TYPE_PATTERNS.items()
        }
        best = max(scores.values(), default=0)
        if best == 0:
            return QuestionType.CONCEPTUAL, scores

        candidates = [QuestionType(value) for value, score in scores.items() if score == best]
        winner = min(candidates, key=lambda question_type: self._priority[question_type])
        return winner, scores

    def assess_complexity(self, text: str, services: list[ServiceReference]) -> QuestionComplexity:
        token_count = len(_TOKEN_PATTERN.findall(text))
        if (
            len(services) >= 3
            or token_count > self.config.complex_token_threshold
            or text.count("?") >= 2
        ):
            return QuestionComplexity.COMPLEX
        if len(services) <= 1 and token_count < self.config.simple_token_threshold:
            return QuestionComplexity.SIMPLE
        return QuestionComplexity.MODERATE

    def suggest_topics(self, question_type: QuestionType, services: list[ServiceReference]) -> list[str]:
        """Map type and services to an ordered topic list that always includes the general topic."""
        topics = list(TYPE_TOPICS.get(question_type, ()))
        for service in services:
            for topic in SERVICE_TOPICS.get(service.service_code, ()):
                if topic not in topics:
                    topics.append(topic)
        if GENERAL_TOPIC not in topics:
            topics.append(GENERAL_TOPIC)
        return topics

    def detect_intent(self, text: str, question_type: QuestionType) -> QuestionIntent:
        for pattern, intent in _INTENT_PATTERNS:
            if pattern.search(text):
                return intent
        return TYPE_INTENTS.get(question_type, QuestionIntent.LEARN)

    def extract_entities(self, text: str) -> list[ExtractedEntity]:
        entities = [
            ExtractedEntity(
                type=entity_type,
                value=match.group(0),
                start=match.start(),
                end=match.end(),
                confidence=confidence,
            )
            for entity_type, pattern, confidence in _ENTITY_PATTERNS
            for match in pattern.finditer(text)
        ]
        return sorted(entities, key=lambda entity: (entity.start, entity.type))

    def _confidence(self, services: list[ServiceReference], type_score: int) -> float:
        service_confidence = sum(s.confidence for s in services) / len(services) if services else 0.0
        type_confidence = min(type_score / self.config.type_score_saturation, 1.0)
        confidence = self.config.service_weight * service_confidence + self.config.type_weight * type_confidence
        return max(0.0, min(1.0, confidence))
