"""Recommendation filtering."""

from cinecrib.services.recommendations.filters import FilterSpec
from cinecrib.services.recommendations.query import (
    RecommendationPage,
    RecommendationQuery,
    build_count_query,
    build_filter_conditions,
    build_page_query,
)

__all__ = [
    "FilterSpec",
    "RecommendationPage",
    "RecommendationQuery",
    "build_count_query",
    "build_filter_conditions",
    "build_page_query",
]
