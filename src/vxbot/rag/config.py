from dataclasses import dataclass


@dataclass
class SearchConfig:
    # raw keyword score contributions
    text_match_weight: float = 1.0
    metadata_keyword_weight: float = 2.0
    glossary_weight: float = 3.0
    topic_bonus: float = 2.0

    # combined = (1 - w) * vector + w * min(keyword / keyword_normalizer, 1)
    keyword_normalizer: float = 10.0
    keyword_share: float = 0.5
    strong_keyword_share: float = 0.6
    strong_keyword_threshold: float = 3.0

    excellent_threshold: float = 0.5
    excellent_min_terms: int = 2
    good_threshold: float = 0.3
    good_min_terms: int = 1
    fair_threshold: float = 0.2

    top_k_choices: tuple[int, ...] = (3, 4)


@dataclass
class GroundingConfig:
    min_overlap_ratio: float = 0.3
    min_overlap_count: int = 3
    min_context_chars: int = 30
    max_tokens: int = 300
    temperature: float = 0.1

    accepted_confidence: float = 0.9
    direct_confidence: float = 0.7
    error_confidence: float = 0.6

    direct_answer_limit: int = 3
    snippet_chars: int = 150

    max_answer_lines: int = 10
