"""Tkinter window that shows frames read from the frame channel."""

from __future__ import annotations

import io
import queue
import threading
from pathlib import Path
from typing import Optional, Union

import tkinter as tk

from PIL import Image, ImageTk

from chess_broadcast.core.logging_utils import get_module_logger

from .frame_reader import FrameStreamError, iter_png_frames

WINDOW_TITLE = "ChatPlaysChess"
BACKGROUND = "#111111"

_END_OF_STREAM = object()


class PreviewWindow:
    """Renders the PNG frame sequence of one channel until it closes.

    A daemon thread does the blocking FIFO reads and PNG decoding; the Tk
    loop polls a small queue and shows only the newest frame, so a slow
    display never stalls the producer.
    """

    def __init__(
        self,
        frame_channel_path: Union[str, Path],
        *,
        title: str = WINDOW_TITLE,
        poll_interval_ms: int = 15,
    ) -> None:
        self.frame_channel_path = Path(frame_channel_path)
        self.title = title
        self.poll_interval_ms = poll_interval_ms
        self.logger = get_module_logger("PreviewWindow")

        self._frames: "queue.Queue[object]" = queue.Queue(maxsize=4)
        self._reader: Optional[threading.Thread] = None
        self._root: Optional[tk.Tk] = None
        self._label: Optional[tk.Label] = None
        self._photo: Optional[ImageTk.PhotoImage] = None
        self.frames_shown = 0
        self.error: Optional[BaseException] = None

    # ------------------------------------------------------------------
    # Reader thread

    def _offer(self, item: object) -> None:
        # Drop the oldest frame instead of blocking the reader.
        while True:
            try:
                self._frames.put_nowait(item)
                return
            except queue.Full:
                try:
                    self._frames.get_nowait()
                except queue.Empty:
                    pass

    def _read_frames(self) -> None:
        try:
            self.logger.info("Opening frame channel %s", self.frame_channel_path)
            with open(self.frame_channel_path, "rb") as channel:
                for data in iter_png_frames(channel):
                    image = Image.open(io.BytesIO(data))
                    image.load()
                    self._offer(image)
            self.logger.info("Frame channel closed by producer")
        except (OSError, FrameStreamError) as exc:
            self.logger.error("Frame channel error: %s", exc)
            self.error = exc
        finally:
            self._offer(_END_OF_STREAM)

    # ------------------------------------------------------------------
    # Tk side

    def _poll(self) -> None:
        latest = None
        try:
            while True:
                latest = self._frames.get_nowait()
                if latest is _END_OF_STREAM:
                    break
        except queue.Empty:
            pass

        if latest is _END_OF_STREAM:
            self.close()
            return

        if latest is not None:
            self._show(latest)

        if self._root is not None:
            self._root.after(self.poll_interval_ms, self._poll)

    def _show(self, image: Image.Image) -> None:
        if self._label is None:
            return
        self._photo = ImageTk.PhotoImage(image)
        self._label.configure(image=self._photo)
        self.frames_shown += 1
        if self.frames_shown == 1:
            self.logger.info("First frame received (%dx%d)", image.width, image.height)

    def close(self) -> None:
        if self._root is not None:
            root, self._root = self._root, None
            root.destroy()

    def run(self) -> None:
        self._root = tk.Tk()
        self._root.title(self.title)
        self._root.configure(background=BACKGROUND)
        self._root.protocol("WM_DELETE_WINDOW", self.close)

        self._label = tk.Label(self._root, background=BACKGROUND, bd=0, highlightthickness=0)
        self._label.pack(fill=tk.BOTH, expand=True)

        self._reader = threading.Thread(target=self._read_frames, name="frame-reader", daemon=True)
        self._reader.start()

        self._root.after(self.poll_interval_ms, self._poll)
        self._root.mainloop()
        self.logger.info("Preview closed after %d frame(s)", self.frames_shown)


__all__ = ["PreviewWindow", "WINDOW_TITLE"]
