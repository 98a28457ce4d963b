"""Domain grouping for symptom items tagged with a clinical domain.

Items are grouped by domain, each group is reduced to one representative
value (max for severity-style domains), and the N highest domains are summed.

Tie-break: when several domains share the value at the N-th position, the
domains encountered first in the input win. Selection relies on Python's
stable sort, so the result is deterministic for a given input order.
"""

from collections.abc import Callable, Iterable, Mapping

Reducer = Callable[[Iterable[int]], int]


def group_domain_values(
    pairs: Iterable[tuple[str, int]],
    reducer: Reducer = max,
) -> dict[str, int]:
    """Reduce (domain, value) pairs to one value per domain.

    Args:
        pairs: (domain_key, value) pairs in questionnaire order
        reducer: Function reducing a domain's values (max or sum)

    Returns:
        Dict of domain -> representative value, in first-encountered order
    """
    grouped: dict[str, list[int]] = {}
    for domain, value in pairs:
        grouped.setdefault(domain, []).append(int(value))
    return {domain: reducer(values) for domain, values in grouped.items()}


def select_top_domains(
    domain_values: Mapping[str, int],
    n: int,
) -> list[tuple[str, int]]:
    """Select the n domains with the highest representative values.

    If fewer than n domains exist, all of them are returned.
    """
    if n < 0:
        raise ValueError(f"Top-N count must be non-negative, got {n}")
    ranked = sorted(domain_values.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]


def sum_top_domains(
    pairs: Iterable[tuple[str, int]],
    n: int,
    reducer: Reducer = max,
) -> int:
    """Group, reduce and sum the top n domain values."""
    domain_values = group_domain_values(pairs, reducer)
    return sum(value for _, value in select_top_domains(domain_values, n))
