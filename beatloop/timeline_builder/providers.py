"""Providers for timeline builder service."""

from functools import cache

from beatloop.timeline_builder.service import TimelineBuilderService


@cache
def timeline_builder_service() -> TimelineBuilderService:
    """Provide a cached instance of the TimelineBuilderService."""
    return TimelineBuilderService()
