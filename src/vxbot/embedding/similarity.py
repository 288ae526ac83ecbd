import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine of the angle between ``a`` and ``b``, clamped to [-1, 1].

    Degenerate input (missing, empty, mismatched lengths, zero norm) yields 0.0.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    if math.isnan(similarity):
        return 0.0
    return max(-1.0, min(1.0, similarity))
