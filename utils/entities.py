"""
Search Parameter Types Module

Immutable parameter bags for the five Weaviate search variants and the options shared
by every ``Get`` query. The tool layer validates values before building these; the
GraphQL builders only serialize them.

Author: Weaviate Team
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from utils.filters import WhereFilter

DEFAULT_SEARCH_LIMIT = 10


class FusionType(str, Enum):
    RANKED = "rankedFusion"
    RELATIVE_SCORE = "relativeScoreFusion"


def _tuple(values: Optional[Sequence]) -> Optional[tuple]:
    return tuple(values) if values is not None else None


@dataclass(frozen=True)
class NearVectorParams:
    vector: Tuple[float, ...]
    certainty: Optional[float] = None
    distance: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "vector", tuple(self.vector))


@dataclass(frozen=True)
class MoveParams:
    """Shift applied to a nearText search towards (or away from) concepts or objects."""

    force: float
    concepts: Optional[Tuple[str, ...]] = None
    objects: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "concepts", _tuple(self.concepts))
        object.__setattr__(self, "objects", _tuple(self.objects))


@dataclass(frozen=True)
class NearTextParams:
    concepts: Tuple[str, ...]
    certainty: Optional[float] = None
    distance: Optional[float] = None
    move_to: Optional[MoveParams] = None
    move_away_from: Optional[MoveParams] = None

    def __post_init__(self):
        object.__setattr__(self, "concepts", tuple(self.concepts))


@dataclass(frozen=True)
class NearObjectParams:
    id: str
    certainty: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class HybridParams:
    query: str
    alpha: Optional[float] = None
    vector: Optional[Tuple[float, ...]] = None
    properties: Optional[Tuple[str, ...]] = None
    fusion_type: Optional[FusionType] = None

    def __post_init__(self):
        object.__setattr__(self, "vector", _tuple(self.vector))
        object.__setattr__(self, "properties", _tuple(self.properties))
        if self.fusion_type is not None:
            object.__setattr__(self, "fusion_type", FusionType(self.fusion_type))


@dataclass(frozen=True)
class Bm25Params:
    query: str
    properties: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "properties", _tuple(self.properties))


@dataclass(frozen=True)
class QueryOptions:
    """
    Options common to every ``Get`` query.

    Attributes:
        limit (Optional[int]): Maximum results; the query uses 10 when unset
        fields (Optional[Tuple[str, ...]]): Selection set; defaults to the ``_additional``
            id/distance/certainty block when unset or empty
        where (Optional[WhereFilter]): Filter applied to the search
        tenant (Optional[str]): Tenant of a multi-tenant collection
    """

    limit: Optional[int] = None
    fields: Optional[Tuple[str, ...]] = None
    where: Optional[WhereFilter] = None
    tenant: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "fields", _tuple(self.fields))
