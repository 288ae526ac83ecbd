import re

from vxbot.rag.glossary import GLOSSARY_TERMS

STOP_WORDS: frozenset[str] = frozenset(
    {"은", "는", "이", "가", "을", "를", "의", "에", "에서", "로", "으로"}
)

MAX_KEYWORDS = 10

# \w already covers Hangul syllables in Python's Unicode-aware regexes
_PUNCTUATION = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Lowercased, punctuation-free tokens longer than one character, minus stop words.

    Order is first occurrence; duplicates are dropped.
    """
    cleaned = _PUNCTUATION.sub(" ", text.lower())
    tokens: list[str] = []
    seen: set[str] = set()
    for word in cleaned.split():
        if len(word) <= 1 or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        tokens.append(word)
    return tokens


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    return tokenize(text)[:limit]


def glossary_terms_in(text: str, terms: tuple[str, ...] = GLOSSARY_TERMS) -> list[str]:
    """Glossary terms that occur anywhere in ``text``.

    Substring matching, so particles glued to a noun ("강남에서") still count.
    """
    lowered = text.lower()
    return [term for term in terms if term in lowered]


def keyword_overlap(answer_keywords: list[str], context_keywords: list[str]) -> int:
    """Number of context keywords covered by some answer keyword (substring either way)."""
    return sum(
        1
        for keyword in context_keywords
        if any(keyword in candidate or candidate in keyword for candidate in answer_keywords)
    )
