"""Vote Analysis — descriptive statistics and consensus metrics for a revealed round.

Invariants:
    - Input is the sanitized, revealed vote set (dicts from vote_visibility) plus room users
    - "?" votes count toward participation and clusters but never toward numeric stats
    - standard deviation is the population form (divide by N)
    - quartiles use truncated indexes floor(0.25n) / floor(0.75n) on the sorted list
    - With no numeric votes every statistic is 0 and mode/outliers are empty
    - Never raises on well-formed input; pure and deterministic

Design Decisions:
    - Labels parsed like a leading-integer parse: "13" -> 13, "1.5" -> 1, unparsable -> 0
    - Insights and recommendations are independent lists; every applicable message is
      returned, order carries no meaning
"""

import math
import re
from collections import Counter
from dataclasses import dataclass, asdict, field
from typing import Iterable

from app.core.domain_types import AgreementLevel, UNKNOWN_CARD
from app.core.repository_protocols import UserLike


HIGH_AGREEMENT_THRESHOLD: float = 80.0
MEDIUM_AGREEMENT_THRESHOLD: float = 60.0
SPLIT_CLUSTER_THRESHOLD: float = 30.0
STRONG_CONSENSUS_THRESHOLD: float = 90.0
LOW_PARTICIPATION_THRESHOLD: float = 50.0
WIDE_RANGE_THRESHOLD: float = 8.0
OUTLIER_IQR_FACTOR: float = 1.5

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class VoteStats:
    average: float = 0.0
    median: float = 0.0
    mode: list[int] = field(default_factory=list)
    standard_deviation: float = 0.0
    range: float = 0.0
    outliers: list[int] = field(default_factory=list)


@dataclass
class VoteCluster:
    label: str
    value: int
    count: int = 0
    percentage: float = 0.0
    users: list[str] = field(default_factory=list)


@dataclass
class SplitGroup:
    values: list[int]
    count: int


@dataclass
class AgreementQuality:
    consensus_strength: float
    agreement_level: AgreementLevel
    has_split: bool
    split_groups: list[SplitGroup] | None = None


@dataclass
class VoteAnalysis:
    stats: VoteStats
    participation_rate: float
    vote_clusters: list[VoteCluster]
    agreement_quality: AgreementQuality
    insights: list[str]
    recommendations: list[str]

    def to_dict(self) -> dict:
        result = asdict(self)
        result["agreement_quality"]["agreement_level"] = (
            self.agreement_quality.agreement_level.value
        )
        return result


def parse_card_label(label: str | None) -> int:
    """Leading-integer parse; anything unparsable counts as 0."""
    match = _LEADING_INT.match(label or "")
    return int(match.group(1)) if match else 0


def numeric_votes(votes: Iterable[dict]) -> list[int]:
    return [
        parse_card_label(v.get("card_label"))
        for v in votes
        if v.get("has_voted") and v.get("card_label") != UNKNOWN_CARD
    ]


def compute_stats(values: list[int]) -> VoteStats:
    if not values:
        return VoteStats()

    ordered = sorted(values)
    n = len(ordered)
    average = sum(ordered) / n

    mid = n // 2
    median = (ordered[mid - 1] + ordered[mid]) / 2 if n % 2 == 0 else ordered[mid]

    frequency = Counter(ordered)
    max_freq = max(frequency.values())
    mode = sorted(v for v, freq in frequency.items() if freq == max_freq)

    variance = sum((v - average) ** 2 for v in ordered) / n
    standard_deviation = math.sqrt(variance)

    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    iqr = q3 - q1
    low_fence = q1 - OUTLIER_IQR_FACTOR * iqr
    high_fence = q3 + OUTLIER_IQR_FACTOR * iqr
    outliers = [v for v in values if v < low_fence or v > high_fence]

    return VoteStats(
        average=average,
        median=median,
        mode=mode,
        standard_deviation=standard_deviation,
        range=ordered[-1] - ordered[0],
        outliers=outliers,
    )


def compute_participation_rate(votes: list[dict], users: list[UserLike]) -> float:
    if not users:
        return 0.0
    voted = sum(1 for v in votes if v.get("has_voted"))
    return voted / len(users) * 100


def compute_clusters(votes: list[dict], users: list[UserLike]) -> list[VoteCluster]:
    """Group voted ballots by label, largest cluster first (ties keep first-seen order)."""
    names = {str(u.id): u.name for u in users}
    clusters: dict[str, VoteCluster] = {}
    voted = [v for v in votes if v.get("has_voted")]

    for vote in voted:
        label = vote.get("card_label")
        if not label:
            continue
        cluster = clusters.setdefault(
            label, VoteCluster(label=label, value=parse_card_label(label)),
        )
        cluster.count += 1
        name = names.get(str(vote.get("user_id")))
        if name is not None:
            cluster.users.append(name)

    total = len(voted)
    for cluster in clusters.values():
        cluster.percentage = cluster.count / total * 100 if total else 0.0

    return sorted(clusters.values(), key=lambda c: c.count, reverse=True)


def compute_agreement(
    stats: VoteStats, clusters: list[VoteCluster],
) -> AgreementQuality:
    if stats.standard_deviation == 0:
        return AgreementQuality(
            consensus_strength=100.0,
            agreement_level=AgreementLevel.HIGH,
            has_split=False,
        )

    normalized = stats.standard_deviation / stats.range if stats.range > 0 else 0.0
    consensus = max(0.0, min(100.0, (1 - normalized) * 100))

    if consensus > HIGH_AGREEMENT_THRESHOLD:
        level = AgreementLevel.HIGH
    elif consensus > MEDIUM_AGREEMENT_THRESHOLD:
        level = AgreementLevel.MEDIUM
    else:
        level = AgreementLevel.LOW

    has_split = (
        len(clusters) >= 2
        and clusters[0].percentage > SPLIT_CLUSTER_THRESHOLD
        and clusters[1].percentage > SPLIT_CLUSTER_THRESHOLD
    )
    split_groups = (
        [SplitGroup(values=[c.value], count=c.count) for c in clusters[:2]]
        if has_split else None
    )
    return AgreementQuality(
        consensus_strength=consensus,
        agreement_level=level,
        has_split=has_split,
        split_groups=split_groups,
    )


def build_insights(
    stats: VoteStats, participation: float, agreement: AgreementQuality,
) -> list[str]:
    insights: list[str] = []
    if participation == 100:
        insights.append("Full team participation achieved")
    elif participation < LOW_PARTICIPATION_THRESHOLD:
        insights.append("Low participation rate may affect estimate reliability")
    if agreement.has_split:
        insights.append("Team opinion is split between different estimates")
    if stats.outliers:
        insights.append("Some estimates significantly differ from the team consensus")
    if agreement.consensus_strength > STRONG_CONSENSUS_THRESHOLD:
        insights.append("Strong team alignment on this estimate")
    return insights


def build_recommendations(
    stats: VoteStats, participation: float, agreement: AgreementQuality,
) -> list[str]:
    recommendations: list[str] = []
    if agreement.has_split:
        recommendations.append(
            "Consider discussing the different perspectives before finalizing",
        )
    if stats.outliers:
        recommendations.append(
            "Review outlier estimates to understand different viewpoints",
        )
    if participation < 100:
        recommendations.append(
            "Encourage all team members to participate for better estimates",
        )
    if stats.range > WIDE_RANGE_THRESHOLD:
        recommendations.append(
            "Wide range of estimates suggests need for more discussion",
        )
    return recommendations


def analyze_votes(votes: list[dict], users: list[UserLike]) -> VoteAnalysis:
    """Full analysis of a revealed round."""
    stats = compute_stats(numeric_votes(votes))
    participation = compute_participation_rate(votes, users)
    clusters = compute_clusters(votes, users)
    agreement = compute_agreement(stats, clusters)
    return VoteAnalysis(
        stats=stats,
        participation_rate=participation,
        vote_clusters=clusters,
        agreement_quality=agreement,
        insights=build_insights(stats, participation, agreement),
        recommendations=build_recommendations(stats, participation, agreement),
    )
