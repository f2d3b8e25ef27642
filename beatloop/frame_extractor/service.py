"""FrameExtractor service for decoding animated GIFs into still frames."""

import io
import logging
from pathlib import Path

from PIL import Image, ImageSequence, UnidentifiedImageError

from beatloop.common.exceptions import DecodeError
from beatloop.frame_extractor.schemas import Frame, FrameSet

logger = logging.getLogger(__name__)

SUPPORTED_FORMAT = "GIF"


def frame_filename(index: int) -> str:
    """Return the on-disk name for a frame.

    Zero padding keeps lexicographic order equal to playback order.
    """
    return f"frame-{index:05d}.png"


class FrameExtractorService:
    """Service for turning an animated GIF into an ordered set of PNG frames."""

    def extract(self, animation_bytes: bytes, output_dir: Path) -> FrameSet:
        """Decode every frame of an animation and write each one as a PNG.

        Args:
            animation_bytes: Raw bytes of the animated GIF.
            output_dir: Existing directory that receives the frame files.

        Returns:
            The decoded frames in native playback order.

        Raises:
            DecodeError: If the bytes are not a well-formed GIF or hold no frames.
        """
        frames: list[Frame] = []

        try:
            with Image.open(io.BytesIO(animation_bytes)) as image:
                if image.format != SUPPORTED_FORMAT:
                    msg = f"Unsupported animation format: {image.format or 'unknown'}"
                    raise DecodeError(msg)

                for index, frame_image in enumerate(ImageSequence.Iterator(image)):
                    frame_path = output_dir / frame_filename(index)
                    frame_image.convert("RGBA").save(frame_path, format="PNG")
                    frames.append(Frame(index=index, path=frame_path))
        except Image.DecompressionBombError as e:
            msg = "Animation is too large to decode"
            raise DecodeError(msg, log_message=str(e)) from e
        except UnidentifiedImageError as e:
            msg = "Animation is not a recognised image"
            raise DecodeError(msg, log_message=str(e)) from e
        except (OSError, EOFError, ValueError) as e:
            msg = "Animation could not be decoded"
            raise DecodeError(msg, log_message=str(e)) from e

        if not frames:
            msg = "Animation contains no frames"
            raise DecodeError(msg)

        logger.info("%d frames extracted from animation", len(frames))
        return FrameSet(frames=frames)
