"""Reading and decoding of image sources"""

from __future__ import annotations

__all__ = ("decode_frames", "load_frames", "read_source")

import io
import logging as _logging
import sys
from typing import List, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests
from PIL import Image, ImageSequence, UnidentifiedImageError

from . import gif
from .compositor import GIFCompositor
from .config import Options
from .exceptions import InputError, NetworkError, URLNotFoundError
from .pipeline import Frame

#: Accepted HTTP content types, in addition to ``image/*``
CONTENT_TYPES = frozenset({"application/octet-stream"})

STDIN = "-"


def read_source(source: str, options: Optional[Options] = None) -> bytes:
    """Reads the raw data of an image.

    Args:
        source: One of:

          * ``-``, for STDIN
          * a file path
          * a ``file://`` URL
          * an ``http://`` or ``https://`` URL

        options: Render options. Defaults to ``Options()``.

    Raises:
        img2ansi.exceptions.InputError: The source can't be read or its URL scheme
          is unrecognized.
        img2ansi.exceptions.URLNotFoundError: The server responded with 404.
        img2ansi.exceptions.NetworkError: The request failed, timed out, was
          redirected or the response doesn't look like an image.
    """
    if options is None:
        options = Options()

    if source == STDIN or options.stdin:
        _logger.debug("Reading from STDIN")
        try:
            return sys.stdin.buffer.read()
        except OSError as e:
            raise InputError(f"Unable to read from STDIN ({e})") from e

    url = urlsplit(source)
    # A single letter is most likely a Windows drive
    if len(url.scheme) <= 1:
        return _read_file(source)
    if url.scheme == "file":
        return _read_file(url2pathname(url.path))
    if url.scheme in {"http", "https"}:
        return _read_http(source, options)

    raise InputError(f"Unrecognized URL {source!r}")


def decode_frames(data: bytes, name: str = "<data>") -> List[Frame]:
    """Decodes image data into frames.

    Args:
        data: Image data in any format supported by Pillow. GIF data is decoded
          and composited by this package.
        name: The name of the source, used in error messages.

    Returns:
        The frames of the image, in display order. A still image results in a
        single frame.

    Raises:
        img2ansi.exceptions.InputError: The data is not a valid image.
    """
    if gif.is_gif(data):
        decoded = gif.decode(data)
        loop_count = _loop_count(decoded.loop_count)
        _logger.debug(
            f"Decoded GIF {name!r}: {decoded.width}x{decoded.height}, "
            f"{len(decoded.layers)} layer(s), loop_count={decoded.loop_count}"
        )
        return [
            Frame(image, layer.delay, loop_count)
            for image, layer in zip(GIFCompositor(decoded), decoded.layers)
        ]

    try:
        img = Image.open(io.BytesIO(data))
        if getattr(img, "is_animated", False):
            loop_count = _loop_count(img.info.get("loop"))
            frames = [
                Frame(
                    frame.convert("RGBA"),
                    frame.info.get("duration", 0) / 1000,
                    loop_count,
                )
                for frame in ImageSequence.Iterator(img)
            ]
        else:
            frames = [Frame(img.convert("RGBA"))]
    except UnidentifiedImageError:
        raise InputError(f"Could not identify {name!r} as an image") from None
    except (OSError, SyntaxError, ValueError) as e:
        raise InputError(f"Unable to decode {name!r} ({e})") from e

    _logger.debug(f"Decoded {img.format} image {name!r}: {len(frames)} frame(s)")
    return frames


def load_frames(source: str, options: Optional[Options] = None) -> List[Frame]:
    """Reads and decodes an image source.

    See :py:func:`read_source` and :py:func:`decode_frames`.
    """
    if options is None:
        options = Options()

    name = "<stdin>" if source == STDIN or options.stdin else source
    return decode_frames(read_source(source, options), name)


def _loop_count(loop: Optional[int]) -> int:
    """Converts a loop count as stored in an image into a repeat count.

    In the image, zero means "loop forever" and an absent count means "play once".
    """
    if loop is None:
        return 0
    return loop or -1


def _read_file(filepath: str) -> bytes:
    try:
        with open(filepath, "rb") as f:
            return f.read()
    except OSError as e:
        raise InputError(
            f"Unable to read {filepath!r} ({e.strerror or type(e).__name__})"
        ) from e


def _read_http(url: str, options: Options) -> bytes:
    headers = {"User-Agent": options.user_agent} if options.user_agent else {}
    _logger.debug(f"Fetching {url!r}")
    try:
        response = requests.get(
            url,
            headers=headers,
            timeout=options.http_timeout,
            allow_redirects=False,
        )
    except requests.Timeout:
        raise NetworkError(f"http: request timed out {url}") from None
    except requests.RequestException as e:
        raise NetworkError(f"http: {e}") from e

    status = f"{response.status_code} {response.reason or ''}".rstrip()
    if response.status_code == 404:
        raise URLNotFoundError(f"http: {status} {url}")
    if not 200 <= response.status_code < 300:
        raise NetworkError(f"http: {status} {url}")

    content_type = response.headers.get("Content-Type", "")
    mime = content_type.partition(";")[0].strip().lower()
    if not (mime.startswith("image/") or mime in CONTENT_TYPES):
        raise NetworkError(f"mime: {content_type or '(none)'} {url}")

    return response.content


_logger = _logging.getLogger(__name__)
