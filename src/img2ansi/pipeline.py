"""
Rendering pipeline

Frames flow through a chain of stages, each running in its own thread::

    frames -> Resizer -> Looper -> Encoder -> (calling thread) Pacer -> output

Adjacent stages are connected by single-slot queues, so no stage ever runs more
than one frame ahead of the next. A single event signals cancellation to every
stage.
"""

from __future__ import annotations

__all__ = (
    "DEFAULT_FRAME_DELAY",
    "EncodedFrame",
    "Frame",
    "Pacer",
    "loop_frames",
    "render",
    "resize_frame",
    "resolve_delay",
    "resolve_repeat",
)

import logging as _logging
import sys
import time
from dataclasses import replace
from itertools import chain
from queue import Empty, Full, Queue
from threading import Event
from typing import BinaryIO, Callable, Iterable, Iterator, NamedTuple, Optional

from PIL import Image

from . import logging
from .color import Quantizer, get_quantizer
from .config import Options
from .ctlseqs import CURSOR_UP_b, HIDE_CURSOR_b, SHOW_CURSOR_b, SGR_NORMAL_b
from .encode import Encoder
from .exceptions import WriteError
from .framebuffer import FrameBuffer
from .geometry import size_rect
from .utils import get_terminal_size

#: Display duration of frames which specify none, in seconds
DEFAULT_FRAME_DELAY = 0.1

#: Interval at which blocked stages check for cancellation, in seconds
POLL_INTERVAL = 0.05

#: Number of render buffers recycled between the encoder and the pacer
N_BUFFERS = 2

# End-of-stream marker
_END = None


class Frame(NamedTuple):
    """A single bitmap of a (possibly animated) image."""

    #: RGBA bitmap
    image: Image.Image

    #: Display duration, in seconds; zero means unspecified
    delay: float = 0.0

    #: Extra passes over the sequence requested by the source; negative means
    #: indefinitely
    loop_count: int = 0


class EncodedFrame(NamedTuple):
    """A frame encoded into terminal output, ready to be written."""

    buffer: FrameBuffer
    delay: float
    loop_count: int

    #: The number of lines written by the buffer
    lines: int


def resolve_repeat(options: Options, loop_count: int) -> int:
    """Returns the number of extra passes to make over a frame sequence.

    An explicit repeat count always wins. Otherwise, the source's loop count
    applies but only when animating; a still render is done just once.
    """
    if options.repeat is not None:
        return options.repeat

    return loop_count if options.animate else 0


def resolve_delay(options: Options, frame_delay: float) -> float:
    """Returns the time for which a frame should be displayed, in seconds."""
    return options.delay or frame_delay or DEFAULT_FRAME_DELAY


def resize_frame(frame: Frame, options: Options) -> Frame:
    """Resizes a frame to fit within the bounds given by *options*.

    The size of the terminal is **not** looked up here i.e *options.fit_terminal*
    is ignored; *options.width* and *options.height* should have been set
    accordingly (as done by :py:func:`render`).
    """
    image = frame.image
    size = size_rect(
        image.size,
        width=options.width,
        height=options.height,
        font_aspect=options.font_aspect,
    )
    if size == image.size:
        return frame

    return frame._replace(image=image.resize(size, Image.Resampling.NEAREST))


def loop_frames(
    frames: Iterable[Frame], repeat: int, cancelled: Optional[Event] = None
) -> Iterator[Frame]:
    """Yields every frame of *frames*, then replays them *repeat* more times.

    Args:
        frames: The source sequence; iterated over only once.
        repeat: Number of replays. If negative, the frames are replayed until
          *cancelled* is set (or the generator is closed).
        cancelled: Checked before every replay.

    Frames are buffered during the first pass; the replays yield the very same
    ``Frame`` instances.
    """
    buffered = []
    for frame in frames:
        buffered.append(frame)
        yield frame

    n = 0
    while buffered and (repeat < 0 or n < repeat):
        if cancelled is not None and cancelled.is_set():
            return
        yield from buffered
        n += 1


class Pacer:
    """Writes encoded frames to the output at the proper cadence.

    Args:
        output: A binary output stream.
        options: Render options. Only *animate*, *delay* and the repeat count
          matter here.
        clock: Returns the current time in seconds.
        sleep: Suspends execution for a number of seconds.

    When animating, every frame is displayed for its resolved delay, measured from
    the start of its display, and drawn over the previous frame. Otherwise, frames
    are written one after the other immediately.
    """

    def __init__(
        self,
        output: BinaryIO,
        options: Options,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._output = output
        self._options = options
        self._clock = clock
        self._sleep = sleep
        self._last_start: Optional[float] = None
        self._last_delay = 0.0
        self._last_lines = 0
        self._cursor_hidden = False

    def draw(self, frame: EncodedFrame) -> None:
        """Writes a frame, after waiting for the previous frame's turn to elapse.

        Raises:
            img2ansi.exceptions.WriteError: Writing to the output failed.

        The frame's buffer is emptied and may be reused as soon as this returns.
        """
        animate = self._options.animate

        if self._last_start is None:
            if animate and self._output_is_tty():
                self._write(HIDE_CURSOR_b)
                self._cursor_hidden = True
        elif animate:
            self._sleep(max(0.0, self._last_start + self._last_delay - self._clock()))
            if self._last_lines:
                self._write(CURSOR_UP_b % self._last_lines)

        self._last_start = self._clock()
        frame.buffer.flush_to(self._output)
        self._last_delay = resolve_delay(self._options, frame.delay)
        self._last_lines = frame.lines

    def close(self, completed: bool = True) -> None:
        """Shows the cursor, if hidden.

        Args:
            completed: If ``False``, rendering was cut short and the terminal's
              default colors are also restored, since the last frame may have been
              left incomplete.

        A completed render already ends with a reset, so nothing else is written
        then, unless the cursor was hidden.
        """
        data = b"" if completed else SGR_NORMAL_b
        if self._cursor_hidden:
            data += SHOW_CURSOR_b
            self._cursor_hidden = False
        if data:
            self._write(data)

    def _output_is_tty(self) -> bool:
        try:
            return self._output.isatty()
        except (AttributeError, ValueError):
            return False

    def _write(self, data: bytes) -> None:
        try:
            self._output.write(data)
            self._output.flush()
        except OSError as e:
            raise WriteError(f"Unable to write output ({e})") from e


def render(
    frames: Iterable[Frame],
    options: Optional[Options] = None,
    quantizer: Optional[Quantizer] = None,
    output: Optional[BinaryIO] = None,
) -> None:
    """Renders a sequence of frames.

    Args:
        frames: The frames, in display order.
        options: Render options. Defaults to ``Options()``.
        quantizer: Maps pixel colors to escape codes. Defaults to one for
          *options.palette* and *options.alpha_threshold*.
        output: A binary output stream. Defaults to ``sys.stdout.buffer``.

    Raises:
        img2ansi.exceptions.WriteError: Writing to *output* failed.
        KeyboardInterrupt: Rendering was interrupted.

    Any exception raised within a stage cancels the whole pipeline and is
    re-raised here. In any case, all stages have exited and the terminal's default
    colors have been restored by the time this function returns or raises.
    """
    if options is None:
        options = Options()
    if quantizer is None:
        quantizer = get_quantizer(options.palette, options.alpha_threshold)
    if output is None:
        output = sys.stdout.buffer

    if options.fit_terminal:
        columns, lines = get_terminal_size()
        options = replace(
            options,
            width=max(columns - 2 * len(options.pad), 1),
            height=max(lines - 1, 1),
            fit_terminal=False,
        )

    frames = iter(frames)
    first = next(frames, _END)
    if first is _END:
        return
    repeat = resolve_repeat(options, first.loop_count)
    frames = chain((first,), frames)

    cancelled = Event()
    resized = Queue(1)
    looped = Queue(1)
    encoded = Queue(1)
    free_buffers = Queue()
    for buffer in FrameBuffer.allocate(N_BUFFERS):
        free_buffers.put(buffer)
    encoder = Encoder(quantizer, options.pad)
    pacer = Pacer(output, options)

    stages = [
        logging.Thread(
            target=_stage,
            args=(_resize_frames, cancelled, resized, frames, options),
            name="Resizer",
        ),
        logging.Thread(
            target=_stage,
            args=(_loop_frames, cancelled, looped, resized, repeat),
            name="Looper",
        ),
        logging.Thread(
            target=_stage,
            args=(_encode_frames, cancelled, encoded, looped, encoder, free_buffers),
            name="Encoder",
        ),
    ]
    for stage in stages:
        stage.start()

    _logger.debug(f"Rendering with {encoder!r}, repeat={repeat}")
    completed = False
    try:
        for frame in _drain(encoded, cancelled):
            try:
                pacer.draw(frame)
            finally:
                free_buffers.put(frame.buffer)
        # A failed stage also ends the stream, but sets the event first
        completed = not cancelled.is_set()
    except BaseException:
        cancelled.set()
        raise
    finally:
        # Stages blocked on a full queue or an empty one observe this
        cancelled.set()
        for stage in stages:
            stage.join()
        pacer.close(completed)

    for stage in stages:
        if stage.exception:
            raise stage.exception


def _drain(queue: Queue, cancelled: Event) -> Iterator:
    """Yields items from *queue* until the end-of-stream marker is received or
    *cancelled* is set.
    """
    while not cancelled.is_set():
        try:
            item = queue.get(timeout=POLL_INTERVAL)
        except Empty:
            continue
        if item is _END:
            return
        yield item


def _put(queue: Queue, item, cancelled: Event) -> bool:
    """Puts *item* into *queue*, unless *cancelled* is set before a slot is free.

    Returns:
        ``True`` if the item was put, otherwise ``False``.
    """
    while not cancelled.is_set():
        try:
            queue.put(item, timeout=POLL_INTERVAL)
        except Full:
            continue
        return True

    return False


def _stage(
    produce: Callable[..., Iterator], cancelled: Event, output: Queue, *args
) -> None:
    """Runs a pipeline stage.

    Every item yielded by ``produce(cancelled, *args)`` is forwarded to *output*,
    followed by the end-of-stream marker. Any exception cancels the pipeline.
    """
    try:
        for item in produce(cancelled, *args):
            if not _put(output, item, cancelled):
                return
        _put(output, _END, cancelled)
    except BaseException:
        cancelled.set()
        raise


def _resize_frames(
    cancelled: Event, frames: Iterator[Frame], options: Options
) -> Iterator[Frame]:
    for frame in frames:
        if cancelled.is_set():
            return
        yield resize_frame(frame, options)


def _loop_frames(cancelled: Event, input: Queue, repeat: int) -> Iterator[Frame]:
    yield from loop_frames(_drain(input, cancelled), repeat, cancelled)


def _encode_frames(
    cancelled: Event, input: Queue, encoder: Encoder, free_buffers: Queue
) -> Iterator[EncodedFrame]:
    for frame in _drain(input, cancelled):
        buffer = next(_drain(free_buffers, cancelled), _END)
        if buffer is _END:
            return
        lines = encoder.encode(frame.image, buffer)
        yield EncodedFrame(buffer, frame.delay, frame.loop_count, lines)


_logger = _logging.getLogger(__name__)
