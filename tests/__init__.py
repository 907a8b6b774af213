import io
import os
import struct

from PIL import Image

import img2ansi.pipeline


def get_terminal_size():
    return os.terminal_size((80, 30))


img2ansi.pipeline.get_terminal_size = get_terminal_size


def lzw_encode(indices, min_code_size):
    """Encodes color indices without any compression.

    A clear code is emitted often enough for the code size to never grow.
    """
    clear = 1 << min_code_size
    code_size = min_code_size + 1
    codes = []
    for i, index in enumerate(indices):
        if not i % (clear - 2):
            codes.append(clear)
        codes.append(index)
    codes.append(clear + 1)

    acc = n_bits = 0
    data = bytearray()
    for code in codes:
        acc |= code << n_bits
        n_bits += code_size
        while n_bits >= 8:
            data.append(acc & 0xFF)
            acc >>= 8
            n_bits -= 8
    if n_bits:
        data.append(acc)

    return bytes(data)


def sub_blocks(data):
    return (
        b"".join(
            bytes((len(data[i : i + 255]),)) + data[i : i + 255]
            for i in range(0, len(data), 255)
        )
        + b"\0"
    )


def palette_bytes(palette):
    """Pads the palette to a power of two and returns it with the size exponent."""
    size_exp = 0
    while 2 << size_exp < len(palette):
        size_exp += 1
    palette = list(palette) + [(0, 0, 0)] * ((2 << size_exp) - len(palette))
    return b"".join(bytes(rgb) for rgb in palette), size_exp


def build_layer(
    indices,
    box,
    *,
    palette=None,
    transparent=None,
    disposal=0,
    delay=0,
    interlaced=False,
    min_code_size=2,
):
    """Builds a graphic control extension plus an image block.

    *indices* are in row-major order, regardless of *interlaced*.
    """
    left, top, width, height = box
    gce_packed = disposal << 2 | (transparent is not None)
    data = b"\x21\xf9\x04" + struct.pack(
        "<BHB", gce_packed, delay, transparent or 0
    ) + b"\0"

    if interlaced:
        rows = [indices[y * width : (y + 1) * width] for y in range(height)]
        indices = [
            index
            for start, step in ((0, 8), (4, 8), (2, 4), (1, 2))
            for y in range(start, height, step)
            for index in rows[y]
        ]

    packed = 0x40 * interlaced
    local_palette = b""
    if palette:
        local_palette, size_exp = palette_bytes(palette)
        packed |= 0x80 | size_exp

    data += b"\x2c" + struct.pack("<HHHHB", left, top, width, height, packed)
    data += local_palette
    data += bytes((min_code_size,)) + sub_blocks(lzw_encode(indices, min_code_size))

    return data


def build_gif(
    size,
    layers,
    *,
    palette=None,
    background=0,
    loop=None,
    comment=None,
    trailer=True,
):
    """Builds a GIF data stream out of layers built with :py:func:`build_layer`."""
    width, height = size
    packed = 0
    global_palette = b""
    if palette:
        global_palette, size_exp = palette_bytes(palette)
        packed = 0x80 | size_exp

    data = b"GIF89a" + struct.pack("<HHBBB", width, height, packed, background, 0)
    data += global_palette
    if loop is not None:
        data += b"\x21\xff\x0bNETSCAPE2.0" + sub_blocks(struct.pack("<BH", 1, loop))
    if comment is not None:
        data += b"\x21\xfe" + sub_blocks(comment)
    data += b"".join(layers)
    if trailer:
        data += b"\x3b"

    return data


def image_bytes(image, format="PNG", **kwargs):
    buf = io.BytesIO()
    image.save(buf, format, **kwargs)
    return buf.getvalue()


def solid(color, size=(1, 1), mode="RGBA"):
    return Image.new(mode, size, color)
