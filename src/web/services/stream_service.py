from __future__ import annotations

import logging
import time
from typing import Iterator, Optional

import cv2
import numpy as np

from session.dashboard import DashboardSession

BOUNDARY = "frame"
NO_FRAME_TIMEOUT_S = 5.0

def encode_jpeg(frame: np.ndarray) -> Optional[bytes]:
    ok, buf = cv2.imencode(".jpg", frame)
    return buf.tobytes() if ok else None

def encode_png(image: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image)
    if not ok:
        raise RuntimeError("Failed to encode PNG")
    return buf.tobytes()


class StreamService:
    @staticmethod
    def mjpeg_stream(
        session: DashboardSession,
        fps: int = 15,
        overlay: bool = True,
        max_frames: Optional[int] = None,
        no_frame_timeout: float = NO_FRAME_TIMEOUT_S,
    ) -> Iterator[bytes]:
        """
        Yield MJPEG multipart chunks of the bound source.

        Frames come from the playback surface, so the preview never advances
        the source. With overlay=True the current detections are blended in.

        The stream belongs to the source bound when it was opened. It ends
        when that source is reset or replaced, when nothing is bound, or when
        no frame arrives for `no_frame_timeout` seconds.
        """
        playback = session.frame_source.playback
        if playback is None:
            logging.debug("MJPEG stream requested with no source bound")
            return

        fps = max(1, min(30, int(fps)))
        delay = 1.0 / fps
        sent = 0
        last_frame_at = time.monotonic()

        while max_frames is None or sent < max_frames:
            if session.frame_source.playback is not playback:
                logging.debug("MJPEG stream closed: source released")
                return

            if overlay:
                frame = session.annotated_frame()
            else:
                frame_data = session.frame_source.current_frame()
                frame = frame_data.frame if frame_data is not None else None

            if frame is None:
                if time.monotonic() - last_frame_at > no_frame_timeout:
                    logging.warning(f"MJPEG stream closed: no frame for {no_frame_timeout:.0f}s")
                    return
                time.sleep(0.1)
                continue
            last_frame_at = time.monotonic()

            jpg = encode_jpeg(frame)
            if jpg is None:
                time.sleep(delay)
                continue
            yield b"--" + BOUNDARY.encode() + b"\r\nContent-Type: image/jpeg\r\n\r\n" + jpg + b"\r\n"
            sent += 1
            time.sleep(delay)
