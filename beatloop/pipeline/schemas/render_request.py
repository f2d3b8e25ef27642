"""Inbound render request."""

from beatloop.common.base_beatloop_model import BaseBeatloopModel


class RenderRequest(BaseBeatloopModel):
    """Everything a render job needs from the caller.

    Payloads may be missing here; the job runner rejects them before any
    work starts.
    """

    animation_bytes: bytes | None = None
    audio_bytes: bytes | None = None
    time_per_beat: float
    audio_duration: float
