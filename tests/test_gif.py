import io

import pytest
from PIL import Image

from img2ansi.exceptions import InputError
from img2ansi.gif import MAX_LZW_CODES, Disposal, Layer, decode, is_gif, lzw_decode

from . import build_gif, build_layer, image_bytes, lzw_encode

PALETTE = [(0, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)]


class TestIsGIF:
    @pytest.mark.parametrize("data", [b"GIF87a", b"GIF89a...", build_gif((1, 1), [])])
    def test_gif(self, data):
        assert is_gif(data)

    @pytest.mark.parametrize("data", [b"", b"GIF8", b"GIF90a", b"\x89PNG\r\n\x1a\n"])
    def test_not_gif(self, data):
        assert not is_gif(data)


class TestDisposal:
    @pytest.mark.parametrize("value", [4, 5, 6, 7])
    def test_reserved(self, value):
        assert Disposal(value) is Disposal.UNSPECIFIED

    def test_values(self):
        assert [*Disposal] == [0, 1, 2, 3]


def test_layer_box():
    layer = Layer(1, 2, 3, 4, bytes(12), PALETTE)
    assert layer.box == (1, 2, 4, 6)


class TestLZW:
    @pytest.mark.parametrize("min_code_size", [2, 3, 8])
    def test_uncompressed(self, min_code_size):
        indices = bytes(i % 4 for i in range(1000))
        assert lzw_decode(lzw_encode(indices, min_code_size), min_code_size, 1000) == (
            indices
        )

    def test_kwkwk(self):
        # clear, 1, 6 (not yet in the table i.e 1 + 1), 6, then end at 4 bits since
        # the table is full at 3 bits
        acc = 4 | 1 << 3 | 6 << 6 | 6 << 9 | 5 << 12
        assert lzw_decode(acc.to_bytes(2, "little"), 2, 5) == bytes((1,) * 5)

    @pytest.mark.parametrize("min_code_size", [0, 1, 9, 12])
    def test_invalid_min_code_size(self, min_code_size):
        with pytest.raises(InputError, match="minimum code size"):
            lzw_decode(b"\0", min_code_size, 1)

    def test_invalid_code(self):
        # clear, 7 (beyond the next code to be assigned)
        data = (4 | 7 << 3).to_bytes(1, "little")
        with pytest.raises(InputError, match="Invalid LZW code"):
            lzw_decode(data, 2, 1)

    def test_not_enough_data(self):
        with pytest.raises(InputError, match="Not enough image data"):
            lzw_decode(lzw_encode(bytes(3), 2), 2, 4)

    def test_surplus_truncated(self):
        assert lzw_decode(lzw_encode(bytes(8), 2), 2, 5) == bytes(5)

    def test_pillow_encoded(self):
        # Pillow's encoder fills up the code table
        image = Image.new("P", (64, 64))
        image.putpalette([v for i in range(256) for v in (i, i, i)])
        image.putdata([(x * 7 + y * 13) % 256 for y in range(64) for x in range(64)])
        data = image_bytes(image, "GIF")
        layer = decode(data).layers[0]
        rgb = bytes(v for index in layer.indices for v in layer.palette[index])
        with Image.open(io.BytesIO(data)) as decoded:
            assert rgb == decoded.convert("RGB").tobytes()

    def test_max_codes(self):
        assert MAX_LZW_CODES == 4096


class TestDecode:
    def test_screen(self):
        gif = decode(build_gif((7, 5), [], palette=PALETTE, background=2))
        assert (gif.width, gif.height) == (7, 5)
        assert gif.global_palette == PALETTE
        assert gif.background_index == 2
        assert gif.background == (0, 255, 0)
        assert gif.layers == []
        assert gif.loop_count is None

    def test_layer(self):
        data = build_gif(
            (4, 4),
            [
                build_layer(
                    [1, 2, 3, 0, 1, 2],
                    (1, 2, 3, 2),
                    transparent=0,
                    disposal=2,
                    delay=7,
                )
            ],
            palette=PALETTE,
        )
        (layer,) = decode(data).layers
        assert layer.box == (1, 2, 4, 4)
        assert layer.indices == bytes((1, 2, 3, 0, 1, 2))
        assert layer.palette == PALETTE
        assert layer.transparent_index == 0
        assert layer.disposal is Disposal.BACKGROUND
        assert layer.delay == 0.07

    def test_local_palette(self):
        local = [(1, 2, 3), (4, 5, 6)]
        data = build_gif(
            (2, 1), [build_layer([1, 0], (0, 0, 2, 1), palette=local)], palette=PALETTE
        )
        gif = decode(data)
        assert gif.layers[0].palette == local
        assert gif.global_palette == PALETTE

    def test_no_palette(self):
        with pytest.raises(InputError, match="No color table"):
            decode(build_gif((1, 1), [build_layer([0], (0, 0, 1, 1))]))

    def test_no_global_palette_no_background(self):
        data = build_gif((1, 1), [build_layer([0], (0, 0, 1, 1), palette=PALETTE)])
        assert decode(data).background is None

    def test_pixel_out_of_range(self):
        data = build_gif(
            (2, 1), [build_layer([0, 3], (0, 0, 2, 1))], palette=PALETTE[:2]
        )
        with pytest.raises(InputError, match="out of color table range"):
            decode(data)

    def test_transparent_index_out_of_range(self):
        data = build_gif(
            (1, 1),
            [build_layer([0], (0, 0, 1, 1), transparent=3)],
            palette=PALETTE[:2],
        )
        assert decode(data).layers[0].transparent_index is None

    @pytest.mark.parametrize("height", [1, 2, 5, 8, 13])
    def test_interlaced(self, height):
        indices = [y % 4 for y in range(height) for _ in range(3)]
        data = build_gif(
            (3, height),
            [build_layer(indices, (0, 0, 3, height), interlaced=True)],
            palette=PALETTE,
        )
        assert decode(data).layers[0].indices == bytes(indices)

    @pytest.mark.parametrize("loop,count", [(0, 0), (1, 1), (65535, 65535)])
    def test_loop_count(self, loop, count):
        assert decode(build_gif((1, 1), [], loop=loop)).loop_count == count

    def test_comment(self):
        gif = decode(build_gif((1, 1), [], comment=b"hello" * 100))
        assert gif.comments == [b"hello" * 100]

    def test_gce_applies_to_next_layer_only(self):
        data = build_gif(
            (1, 1),
            [
                build_layer([0], (0, 0, 1, 1), transparent=1, disposal=3, delay=10),
                # Without the graphic control extension
                build_layer([1], (0, 0, 1, 1))[8:],
            ],
            palette=PALETTE,
        )
        first, second = decode(data).layers
        assert first.disposal is Disposal.PREVIOUS
        assert second.disposal is Disposal.UNSPECIFIED
        assert second.transparent_index is None
        assert second.delay == 0.0

    def test_missing_trailer(self):
        data = build_gif(
            (1, 1), [build_layer([1], (0, 0, 1, 1))], palette=PALETTE, trailer=False
        )
        assert len(decode(data).layers) == 1

    @pytest.mark.parametrize(
        "data,match",
        [
            (b"GIF89a\x01\x00", "Unexpected end"),
            (b"PNG89a" + bytes(7), "Not a GIF"),
            (build_gif((1, 1), [], trailer=False), "Unexpected end"),
            (build_gif((1, 1), [], trailer=False) + b"\x99", "Unknown GIF block"),
            (
                build_gif((1, 1), [], trailer=False) + b"\x21\xf9\x03\0\0\0\0",
                "graphic control",
            ),
        ],
    )
    def test_malformed(self, data, match):
        with pytest.raises(InputError, match=match):
            decode(data)

    def test_truncated_layer(self):
        data = build_gif((2, 2), [build_layer([1] * 4, (0, 0, 2, 2))], palette=PALETTE)
        with pytest.raises(InputError):
            decode(data[:-6])

    def test_pillow_animation(self):
        frames = [
            Image.new("P", (4, 3), i) for i in range(3)
        ]
        for frame in frames:
            frame.putpalette([v for rgb in PALETTE for v in rgb])
        data = image_bytes(
            frames[0],
            "GIF",
            save_all=True,
            append_images=frames[1:],
            duration=[100, 200, 300],
            loop=0,
            optimize=False,
        )
        gif = decode(data)
        assert (gif.width, gif.height) == (4, 3)
        assert gif.loop_count == 0
        assert [layer.delay for layer in gif.layers] == [0.1, 0.2, 0.3]
