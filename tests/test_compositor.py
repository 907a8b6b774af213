import pytest
from PIL import Image

from img2ansi.compositor import TRANSPARENT, GIFCompositor, composite
from img2ansi.gif import DecodedGIF, Disposal, Layer, decode

from . import build_gif, build_layer, image_bytes

BLACK, RED, GREEN, BLUE = PALETTE = [(0, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)]


def opaque(rgb):
    return (*rgb, 255)


def pixels(image):
    return list(image.getdata())


def layer(indices, box=(0, 0, 2, 2), **kwargs):
    left, top, width, height = box
    return Layer(left, top, width, height, bytes(indices), PALETTE, **kwargs)


def gif(*layers, size=(2, 2), background=0, palette=PALETTE):
    return DecodedGIF(*size, background, palette, list(layers))


class TestCanvas:
    def test_no_layers(self):
        compositor = GIFCompositor(gif())
        assert len(compositor) == 0
        assert compositor.composite() == []

    def test_size_is_screen(self):
        assert GIFCompositor(gif(layer([1], (0, 0, 1, 1)))).size == (2, 2)

    def test_size_covers_layers(self):
        compositor = GIFCompositor(gif(layer([1] * 6, (2, 1, 3, 2))))
        assert compositor.size == (5, 3)
        (frame,) = compositor.composite()
        assert frame.size == (5, 3)

    def test_mode(self):
        (frame,) = composite(gif(layer([1] * 4)))
        assert frame.mode == "RGBA"

    def test_initially_transparent(self):
        (frame,) = composite(gif(layer([1], (0, 0, 1, 1))))
        assert pixels(frame) == [opaque(RED), TRANSPARENT, TRANSPARENT, TRANSPARENT]

    def test_initially_background_if_last_disposal_is_background(self):
        frames = composite(
            gif(
                layer([1], (0, 0, 1, 1)),
                layer([3], (1, 1, 1, 1), disposal=Disposal.BACKGROUND),
                background=2,
            )
        )
        assert pixels(frames[0]) == [
            opaque(RED),
            opaque(GREEN),
            opaque(GREEN),
            opaque(GREEN),
        ]

    def test_frames_are_copies(self):
        frames = composite(gif(layer([1] * 4), layer([2], (0, 0, 1, 1))))
        assert frames[0] is not frames[1]
        assert pixels(frames[0]) == [opaque(RED)] * 4
        assert pixels(frames[1]) == [opaque(GREEN)] + [opaque(RED)] * 3


class TestTransparency:
    def test_transparent_index_keeps_canvas(self):
        frames = composite(
            gif(layer([1] * 4), layer([2, 0, 0, 3], transparent_index=0))
        )
        assert pixels(frames[1]) == [
            opaque(GREEN),
            opaque(RED),
            opaque(RED),
            opaque(BLUE),
        ]

    def test_without_transparent_index_overwrites(self):
        frames = composite(gif(layer([1] * 4), layer([2, 0, 0, 3])))
        assert pixels(frames[1]) == [
            opaque(GREEN),
            opaque(BLACK),
            opaque(BLACK),
            opaque(BLUE),
        ]

    def test_never_blended(self):
        (frame,) = composite(gif(layer([0, 1, 2, 3], transparent_index=1)))
        assert pixels(frame) == [
            opaque(BLACK),
            TRANSPARENT,
            opaque(GREEN),
            opaque(BLUE),
        ]


class TestDisposal:
    @pytest.mark.parametrize("disposal", [Disposal.UNSPECIFIED, Disposal.NONE])
    def test_none(self, disposal):
        frames = composite(
            gif(layer([1], (0, 0, 1, 1), disposal=disposal), layer([2], (1, 0, 1, 1)))
        )
        assert pixels(frames[1])[:2] == [opaque(RED), opaque(GREEN)]

    def test_background_fills_whole_canvas(self):
        frames = composite(
            gif(
                layer([3] * 4),
                layer([1], (0, 0, 1, 1), disposal=Disposal.BACKGROUND),
                layer([0], (1, 1, 1, 1), transparent_index=0),
                background=2,
            )
        )
        assert pixels(frames[1]) == [opaque(RED)] + [opaque(BLUE)] * 3
        assert pixels(frames[2]) == [opaque(GREEN)] * 4

    def test_background_covers_layers_beyond_screen(self):
        frames = composite(
            gif(
                layer([1] * 6, (2, 1, 3, 2), disposal=Disposal.BACKGROUND),
                layer([0], (0, 0, 1, 1), transparent_index=0),
                background=3,
            )
        )
        assert frames[1].size == (5, 3)
        assert pixels(frames[1]) == [opaque(BLUE)] * 15

    def test_background_without_global_palette_is_transparent(self):
        frames = composite(
            gif(
                layer([3] * 4, disposal=Disposal.BACKGROUND),
                layer([1], (0, 0, 1, 1)),
                palette=None,
            )
        )
        assert pixels(frames[1]) == [opaque(RED)] + [TRANSPARENT] * 3

    def test_previous_restores(self):
        frames = composite(
            gif(
                layer([1] * 4),
                layer([2, 2, 2, 2], disposal=Disposal.PREVIOUS),
                layer([0], (0, 0, 1, 1), transparent_index=0),
            )
        )
        assert pixels(frames[1]) == [opaque(GREEN)] * 4
        assert pixels(frames[2]) == [opaque(RED)] * 4

    def test_previous_restore_round_trip(self):
        compositor = GIFCompositor(
            gif(
                layer([1, 2, 3, 0]),
                layer(
                    [0], (1, 1, 1, 1), transparent_index=0, disposal=Disposal.PREVIOUS
                ),
            )
        )
        first = compositor.render(0)
        second = compositor.render(1)
        assert pixels(second) == pixels(first)
        # Wrapping around to the first layer
        assert compositor.render(0).tobytes() == first.tobytes()

    def test_previous_snapshot_excludes_own_layer(self):
        frames = composite(
            gif(
                layer([1] * 4, disposal=Disposal.PREVIOUS),
                layer([2], (0, 0, 1, 1)),
            )
        )
        # The snapshot is of the initial (transparent) canvas
        assert pixels(frames[1]) == [opaque(GREEN)] + [TRANSPARENT] * 3

    def test_replay_is_identical(self):
        compositor = GIFCompositor(
            gif(
                layer([1] * 4),
                layer([2], (0, 0, 1, 1), disposal=Disposal.BACKGROUND),
                layer([3], (1, 0, 1, 1), disposal=Disposal.PREVIOUS),
                background=0,
            )
        )
        first_pass = [frame.tobytes() for frame in compositor]
        second_pass = [frame.tobytes() for frame in compositor]
        assert first_pass == second_pass


def test_decoded_gif():
    data = build_gif(
        (3, 1),
        [
            build_layer([1, 2, 3], (0, 0, 3, 1)),
            build_layer([0], (1, 0, 1, 1), transparent=0),
            build_layer([0], (2, 0, 1, 1)),
        ],
        palette=PALETTE,
    )
    frames = composite(decode(data))
    assert [pixels(frame) for frame in frames] == [
        [opaque(RED), opaque(GREEN), opaque(BLUE)],
        [opaque(RED), opaque(GREEN), opaque(BLUE)],
        [opaque(RED), opaque(GREEN), opaque(BLACK)],
    ]


def test_matches_pillow():
    frames = [Image.new("RGB", (4, 4), rgb) for rgb in (RED, GREEN, BLUE)]
    frames[1].paste(RED, (0, 0, 2, 2))
    data = image_bytes(
        frames[0], "GIF", save_all=True, append_images=frames[1:], duration=100, loop=0
    )
    ours = composite(decode(data))
    assert [frame.convert("RGB").tobytes() for frame in ours] == [
        frame.tobytes() for frame in frames
    ]
