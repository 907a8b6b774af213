"""
.. GIF Decoding

Decodes a GIF87a/GIF89a data stream into its individual layers.

Unlike general-purpose image libraries, nothing is composited here. Each
:py:class:`Layer` carries the raw color indices of its own sub-rectangle along with
the palette, transparent index and disposal method that apply to it, as required
by :py:class:`~img2ansi.compositor.GIFCompositor`.

See https://www.w3.org/Graphics/GIF/spec-gif89a.txt
"""

from __future__ import annotations

__all__ = ("DecodedGIF", "Disposal", "Layer", "decode", "is_gif")

import io
import logging as _logging
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

from .exceptions import InputError

RGB = Tuple[int, int, int]

# Block introducers and extension labels
EXTENSION = 0x21
IMAGE_DESCRIPTOR = 0x2C
TRAILER = 0x3B
GRAPHIC_CONTROL = 0xF9
APPLICATION = 0xFF

LOOP_APPLICATIONS = (b"NETSCAPE2.0", b"ANIMEXTS1.0")
MAX_LZW_CODES = 1 << 12


class Disposal(IntEnum):
    """What becomes of a layer's area before the next layer is drawn."""

    #: No disposal specified; treated the same as :py:attr:`NONE`
    UNSPECIFIED = 0

    #: Leave the layer in place
    NONE = 1

    #: Restore the layer's area to the background color
    BACKGROUND = 2

    #: Restore the canvas to its state before the layer was drawn
    PREVIOUS = 3

    @classmethod
    def _missing_(cls, value):
        # Values 4 to 7 are reserved
        return cls.UNSPECIFIED


@dataclass
class Layer:
    """A single image within a GIF data stream."""

    left: int
    top: int
    width: int
    height: int
    #: Color indices in row-major order, already de-interlaced
    indices: bytes
    #: The local color table or, in its absence, the global one
    palette: List[RGB]
    transparent_index: Optional[int] = None
    disposal: Disposal = Disposal.UNSPECIFIED
    #: Display duration, in seconds
    delay: float = 0.0

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """The layer's area on the canvas, as a ``(left, top, right, bottom)``
        tuple.
        """
        return (self.left, self.top, self.left + self.width, self.top + self.height)


@dataclass
class DecodedGIF:
    """The contents of a GIF data stream."""

    #: Logical screen width
    width: int
    #: Logical screen height
    height: int
    background_index: int = 0
    global_palette: Optional[List[RGB]] = None
    layers: List[Layer] = field(default_factory=list)
    #: The NETSCAPE looping extension's iteration count (``0`` means forever) or
    #: ``None`` if the extension is absent
    loop_count: Optional[int] = None
    comments: List[bytes] = field(default_factory=list)

    @property
    def background(self) -> Optional[RGB]:
        """The background color or ``None`` if there's no global color table to
        take it from.
        """
        palette = self.global_palette
        if palette and self.background_index < len(palette):
            return palette[self.background_index]
        return None


class _GCE:
    """Graphic Control Extension fields, pending the next image descriptor."""

    __slots__ = ("disposal", "delay", "transparent_index")

    def __init__(self, packed: int = 0, delay: int = 0, transparent: int = 0):
        self.disposal = Disposal((packed >> 2) & 0b111)
        self.delay = delay / 100
        self.transparent_index = transparent if packed & 1 else None


def is_gif(data: bytes) -> bool:
    """Checks if *data* begins with a GIF signature."""
    return data[:6] in {b"GIF87a", b"GIF89a"}


def decode(data: bytes) -> DecodedGIF:
    """Decodes a GIF data stream.

    Args:
        data: The entire data stream.

    Returns:
        The logical screen properties and all layers, in order.

    Raises:
        img2ansi.exceptions.InputError: The data stream is malformed.
    """
    if not is_gif(data):
        raise InputError("Not a GIF data stream (missing GIF87a/GIF89a signature)")

    buf = io.BytesIO(data)
    buf.seek(6)
    width, height, packed, background_index, _ = _unpack(buf, "<HHBBB")
    gif = DecodedGIF(width, height, background_index)
    if packed & 0x80:
        gif.global_palette = _read_palette(buf, packed & 0b111)

    gce = _GCE()
    while True:
        introducer = buf.read(1)
        if not introducer:
            if not gif.layers:
                raise InputError("Unexpected end of GIF data stream")
            _logger.debug("Missing trailer, assuming end of data stream")
            break

        introducer = introducer[0]
        if introducer == TRAILER:
            break
        elif introducer == EXTENSION:
            (label,) = _unpack(buf, "B")
            if label == GRAPHIC_CONTROL:
                gce = _read_graphic_control(buf)
            elif label == APPLICATION:
                _read_application(buf, gif)
            else:  # Comment, plain text or unknown
                block = b"".join(_read_sub_blocks(buf))
                if label == 0xFE:
                    gif.comments.append(block)
        elif introducer == IMAGE_DESCRIPTOR:
            gif.layers.append(_read_layer(buf, gif, gce))
            gce = _GCE()  # A GCE applies to the next image only
        else:
            raise InputError(f"Unknown GIF block introducer: 0x{introducer:02X}")

    _logger.debug(
        f"Decoded GIF: {width}x{height}, {len(gif.layers)} layer(s), "
        f"loop count: {gif.loop_count}"
    )
    return gif


def lzw_decode(data: bytes, min_code_size: int, n_pixels: int) -> bytes:
    """Decompresses GIF image data.

    Args:
        data: The image data with sub-block framing removed.
        min_code_size: The LZW minimum code size.
        n_pixels: The number of pixels in the layer.

    Returns:
        Exactly *n_pixels* color indices.

    Raises:
        img2ansi.exceptions.InputError: Invalid code or not enough data.
    """
    if not 2 <= min_code_size <= 8:
        raise InputError(f"Invalid LZW minimum code size: {min_code_size}")

    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    base_table = [bytes((i,)) for i in range(clear_code)] + [b"", b""]
    table = base_table[:]
    code_size = min_code_size + 1
    code_mask = (1 << code_size) - 1
    prev = None
    out = bytearray()

    acc = n_bits = 0
    for byte in data:
        acc |= byte << n_bits
        n_bits += 8
        while n_bits >= code_size:
            code = acc & code_mask
            acc >>= code_size
            n_bits -= code_size

            if code == clear_code:
                table = base_table[:]
                code_size = min_code_size + 1
                code_mask = (1 << code_size) - 1
                prev = None
                continue
            if code == end_code:
                return _check_pixels(out, n_pixels)

            if code < len(table):
                entry = table[code]
                if prev is not None and len(table) < MAX_LZW_CODES:
                    table.append(prev + entry[:1])
            elif code == len(table) and prev is not None:
                entry = prev + prev[:1]
                table.append(entry)
            else:
                raise InputError(f"Invalid LZW code: {code}")

            out += entry
            prev = entry
            if len(table) == code_mask + 1 and code_size < 12:
                code_size += 1
                code_mask = (1 << code_size) - 1

    return _check_pixels(out, n_pixels)


def _check_pixels(indices: bytearray, n_pixels: int) -> bytes:
    if len(indices) < n_pixels:
        raise InputError(
            f"Not enough image data (got: {len(indices)} of {n_pixels} pixels)"
        )
    return bytes(indices[:n_pixels])


def _deinterlace(indices: bytes, width: int, height: int) -> bytes:
    out = bytearray(len(indices))
    rows = iter(range(0, len(indices), width))
    for start, step in ((0, 8), (4, 8), (2, 4), (1, 2)):
        for y in range(start, height, step):
            i = next(rows)
            out[y * width : (y + 1) * width] = indices[i : i + width]
    return bytes(out)


def _read_application(buf: io.BytesIO, gif: DecodedGIF) -> None:
    (size,) = _unpack(buf, "B")
    identifier = _read(buf, size)
    data = b"".join(_read_sub_blocks(buf))
    # Looping sub-block: 0x01, then the iteration count as an unsigned short
    if identifier in LOOP_APPLICATIONS and len(data) >= 3 and data[0] == 1:
        (gif.loop_count,) = struct.unpack("<H", data[1:3])


def _read_graphic_control(buf: io.BytesIO) -> _GCE:
    (size,) = _unpack(buf, "B")
    if size != 4:
        raise InputError(f"Invalid graphic control extension block size: {size}")
    packed, delay, transparent = _unpack(buf, "<BHB")
    # Block terminator, and any (non-conforming) extra sub-blocks
    for _ in _read_sub_blocks(buf):
        pass
    return _GCE(packed, delay, transparent)


def _read_layer(buf: io.BytesIO, gif: DecodedGIF, gce: _GCE) -> Layer:
    left, top, width, height, packed = _unpack(buf, "<HHHHB")
    if packed & 0x80:
        palette = _read_palette(buf, packed & 0b111)
    elif gif.global_palette:
        palette = gif.global_palette
    else:
        raise InputError(f"No color table for layer {len(gif.layers)}")

    (min_code_size,) = _unpack(buf, "B")
    indices = lzw_decode(
        b"".join(_read_sub_blocks(buf)), min_code_size, width * height
    )
    if packed & 0x40 and indices:
        indices = _deinterlace(indices, width, height)
    if indices and max(indices) >= len(palette):
        raise InputError(
            f"Pixel value out of color table range in layer {len(gif.layers)}"
        )

    transparent_index = gce.transparent_index
    if transparent_index is not None and transparent_index >= len(palette):
        transparent_index = None  # Can't match any pixel anyways

    return Layer(
        left,
        top,
        width,
        height,
        indices,
        palette,
        transparent_index,
        gce.disposal,
        gce.delay,
    )


def _read(buf: io.BytesIO, n: int) -> bytes:
    data = buf.read(n)
    if len(data) < n:
        raise InputError("Unexpected end of GIF data stream")
    return data


def _read_palette(buf: io.BytesIO, size_exp: int) -> List[RGB]:
    data = _read(buf, 3 << (size_exp + 1))
    return [tuple(data[i : i + 3]) for i in range(0, len(data), 3)]


def _read_sub_blocks(buf: io.BytesIO):
    """Yields the data of each sub-block up to (and consuming) the block
    terminator.
    """
    while True:
        (size,) = _unpack(buf, "B")
        if not size:
            break
        yield _read(buf, size)


def _unpack(buf: io.BytesIO, fmt: str) -> tuple:
    return struct.unpack(fmt, _read(buf, struct.calcsize(fmt)))


_logger = _logging.getLogger(__name__)
