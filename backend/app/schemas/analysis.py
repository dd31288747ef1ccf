"""Analysis Schemas — response shape of a revealed round's vote analysis.

Invariants:
    - Mirrors core/vote_analysis.VoteAnalysis.to_dict() field for field
"""

from pydantic import BaseModel

from app.core.domain_types import AgreementLevel


class VoteStatsResponse(BaseModel):
    average: float
    median: float
    mode: list[int]
    standard_deviation: float
    range: float
    outliers: list[int]


class VoteClusterResponse(BaseModel):
    label: str
    value: int
    count: int
    percentage: float
    users: list[str]


class SplitGroupResponse(BaseModel):
    values: list[int]
    count: int


class AgreementQualityResponse(BaseModel):
    consensus_strength: float
    agreement_level: AgreementLevel
    has_split: bool
    split_groups: list[SplitGroupResponse] | None = None


class VoteAnalysisResponse(BaseModel):
    stats: VoteStatsResponse
    participation_rate: float
    vote_clusters: list[VoteClusterResponse]
    agreement_quality: AgreementQualityResponse
    insights: list[str]
    recommendations: list[str]
