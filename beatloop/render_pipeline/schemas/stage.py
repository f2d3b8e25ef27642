"""Encoder stage identifiers."""

from enum import IntEnum


class EncoderStage(IntEnum):
    """The two sequential encoder invocations of a render."""

    ASSEMBLE = 1
    MUX = 2
