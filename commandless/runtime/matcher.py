"""
Multi-signal similarity scoring between raw input and catalog entries.

Five signals are combined: direct name match, phrase-pattern match,
primary-pattern overlap, semantic keywords and description overlap.
Direct matches dominate; paraphrases still surface above threshold.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .firewall import tokenize
from .patterns import PLACEHOLDER_RE, CatalogEntry
from .slots import Slot
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

PARTIAL_PHRASE_FACTOR = 0.8


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert/delete/substitute, cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity: 1 - distance / max(len(a), len(b))."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def word_matches(word: str, candidates: Iterable[str], threshold: float) -> bool:
    return any(word == c or similarity(word, c) >= threshold for c in candidates)


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word containment of a phrase in lower-cased text."""
    phrase = phrase.lower().strip()
    if not phrase:
        return False
    return re.search(r"(?<![a-z0-9])" + re.escape(phrase) + r"(?![a-z0-9])", text) is not None


@dataclass
class ScoringWeights:
    """Weights of the five similarity signals."""
    direct_name: float = 0.8
    phrase_pattern: float = 0.7
    pattern_overlap: float = 0.5
    semantic_keyword: float = 0.4
    description: float = 0.2


@dataclass
class ComponentScores:
    """Raw signal values, each in [0, 1]."""
    direct_name_match: float = 0.0
    phrase_pattern_score: float = 0.0
    pattern_overlap_score: float = 0.0
    semantic_keyword_score: float = 0.0
    description_score: float = 0.0

    def weighted_sum(self, weights: ScoringWeights) -> float:
        return (
            self.direct_name_match * weights.direct_name
            + self.phrase_pattern_score * weights.phrase_pattern
            + self.pattern_overlap_score * weights.pattern_overlap
            + self.semantic_keyword_score * weights.semantic_keyword
            + self.description_score * weights.description
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "direct_name_match": self.direct_name_match,
            "phrase_pattern_score": self.phrase_pattern_score,
            "pattern_overlap_score": self.pattern_overlap_score,
            "semantic_keyword_score": self.semantic_keyword_score,
            "description_score": self.description_score,
        }


@dataclass
class MatchCandidate:
    """Score of one catalog entry against one message."""
    entry: CatalogEntry
    raw_input: str
    component_scores: ComponentScores
    aggregate_score: float
    extracted_params: Dict[Slot, str] = field(default_factory=dict)

    def missing_slots(self) -> List[Slot]:
        """Required slots without a non-empty extracted value."""
        return [
            slot for slot in sorted(self.entry.required_slots, key=lambda s: s.value)
            if not (self.extracted_params.get(slot) or "").strip()
        ]


class SimilarityScorer:
    """Score raw input against catalog entries.

    Example:
        scorer = SimilarityScorer()
        candidate = scorer.score("please remove spammer", ban_entry)
        print(candidate.aggregate_score)  # 0.7+
    """

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        weights: Optional[ScoringWeights] = None,
        word_threshold: float = 0.8
    ):
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self.weights = weights or ScoringWeights()
        self.word_threshold = word_threshold

    def score(self, text: str, entry: CatalogEntry) -> MatchCandidate:
        """
        Compute the aggregate score of one entry.

        Args:
            text: Message text (mentions stripped)
            entry: Catalog entry to score

        Returns:
            MatchCandidate with component and aggregate scores
        """
        lowered = text.lower()
        words = tokenize(lowered)
        name = entry.command_name.lower()

        components = ComponentScores(
            direct_name_match=self.direct_name_score(lowered, name),
            phrase_pattern_score=self.phrase_pattern_score(lowered, words, name),
            pattern_overlap_score=self.pattern_overlap_score(words, entry.primary_pattern),
            semantic_keyword_score=self.semantic_keyword_score(lowered, name),
            description_score=self.description_score(words, entry.description),
        )
        aggregate = min(max(components.weighted_sum(self.weights), 0.0), 1.0)

        logger.debug(f"Score /{entry.command_name}={aggregate:.3f} {components.to_dict()}")
        return MatchCandidate(
            entry=entry,
            raw_input=text,
            component_scores=components,
            aggregate_score=aggregate,
        )

    def score_all(self, text: str, entries: Iterable[CatalogEntry]) -> List[MatchCandidate]:
        """Score every entry, preserving catalog order."""
        return [self.score(text, entry) for entry in entries]

    def direct_name_score(self, lowered: str, name: str) -> float:
        if contains_phrase(lowered, name):
            return 1.0
        spaced = re.sub(r"[-_]+", " ", name)
        if spaced != name and contains_phrase(lowered, spaced):
            return 1.0
        return 0.0

    def phrase_pattern_score(self, lowered: str, words: List[str], name: str) -> float:
        best = 0.0
        for phrase in self.vocabulary.phrases_for(name):
            if contains_phrase(lowered, phrase):
                return 1.0
            content = [pw for pw in phrase.split() if pw not in self.vocabulary.phrase_stopwords]
            if not content:
                continue
            matched = sum(
                1 for pw in content if word_matches(pw, words, self.word_threshold)
            )
            best = max(best, PARTIAL_PHRASE_FACTOR * matched / len(content))
        return best

    def pattern_overlap_score(self, words: List[str], primary_pattern: str) -> float:
        cleaned = PLACEHOLDER_RE.sub(" ", primary_pattern.lower())
        pattern_words = [w for w in tokenize(cleaned) if len(w) > 2]
        if not pattern_words:
            return 0.0
        found = sum(1 for pw in pattern_words if word_matches(pw, words, self.word_threshold))
        return found / len(pattern_words)

    def semantic_keyword_score(self, lowered: str, name: str) -> float:
        keywords = self.vocabulary.keywords_for(name)
        if not keywords:
            return 0.0
        found = sum(1 for kw in keywords if contains_phrase(lowered, kw))
        return found / len(keywords)

    def description_score(self, words: List[str], description: str) -> float:
        desc_words = tokenize(description or "")
        if not desc_words:
            return 0.0
        found = sum(1 for dw in desc_words if word_matches(dw, words, self.word_threshold))
        return found / len(desc_words)
