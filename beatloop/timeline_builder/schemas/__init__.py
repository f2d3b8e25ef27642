"""Timeline builder schemas."""

from beatloop.timeline_builder.schemas.timeline import (
    DURATION_DECIMALS,
    Timeline,
    TimelineEntry,
)

__all__ = [
    "DURATION_DECIMALS",
    "Timeline",
    "TimelineEntry",
]
