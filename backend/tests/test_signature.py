import base64
import io

import numpy as np
import pytest
from PIL import Image

import services.signature as m
from domain.errors import SignatureDecodeError
from domain.models import RenderTarget, SignatureBuffer


def _buffer(size=(9, 9), pixels=()) -> SignatureBuffer:
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    for xy, rgba in pixels:
        img.putpixel(xy, rgba)
    return SignatureBuffer(image=img)


def _alpha(buffer: SignatureBuffer) -> np.ndarray:
    return np.asarray(buffer.image)[..., 3]


def test_dilate_single_pixel_grows_to_3x3():
    buf = _buffer(pixels=[((4, 4), (10, 20, 30, 255))])
    out = m.dilate(buf)
    alpha = _alpha(out)
    assert (alpha[3:6, 3:6] == 255).all()
    assert alpha.sum() == 9 * 255
    assert out.image.getpixel((3, 3)) == (10, 20, 30, 255)


def test_dilate_is_a_superset_and_monotonic():
    rng = np.random.default_rng(7)
    arr = np.zeros((20, 30, 4), dtype=np.uint8)
    mask = rng.random((20, 30)) > 0.9
    arr[mask] = (0, 0, 0, 200)
    buf = SignatureBuffer(image=Image.fromarray(arr))
    out = _alpha(m.dilate(buf))
    src = arr[..., 3]
    assert (out >= src).all()
    assert ((src > 0) <= (out > 0)).all()


def test_dilate_takes_strongest_neighbor():
    buf = _buffer(pixels=[((3, 4), (255, 0, 0, 100)), ((5, 4), (0, 0, 255, 250))])
    out = m.dilate(buf)
    # (4, 4) is adjacent to both sources; the stronger alpha wins
    assert out.image.getpixel((4, 4)) == (0, 0, 255, 250)


def test_dilate_does_not_cascade():
    buf = _buffer(pixels=[((0, 0), (0, 0, 0, 255))])
    alpha = _alpha(m.dilate(buf))
    assert alpha[2, 2] == 0
    assert alpha[1, 1] == 255


def test_dilate_leaves_source_untouched():
    buf = _buffer(pixels=[((4, 4), (0, 0, 0, 255))])
    m.dilate(buf)
    assert _alpha(buf).sum() == 255


def test_fit_wide_signature_touches_width():
    fit = m.fit_to_area(600, 100, 500, 200)
    assert fit.width == pytest.approx(500)
    assert fit.height == pytest.approx(500 / 6)
    assert fit.offset_x == 0
    assert fit.offset_y == pytest.approx((200 - 500 / 6) / 2)


def test_fit_tall_signature_touches_height():
    fit = m.fit_to_area(100, 400, 500, 200)
    assert fit.height == pytest.approx(200)
    assert fit.width == pytest.approx(50)
    assert fit.offset_x == pytest.approx(225)
    assert fit.offset_y == 0


@pytest.mark.parametrize("src", [(300, 100), (123, 77), (50, 500), (1000, 400)])
def test_fit_preserves_aspect_ratio(src):
    fit = m.fit_to_area(src[0], src[1], 500, 200)
    assert fit.width / fit.height == pytest.approx(src[0] / src[1])
    assert fit.width <= 500 + 1e-9 and fit.height <= 200 + 1e-9


def test_decode_signature_rejects_garbage():
    with pytest.raises(SignatureDecodeError):
        m.decode_signature(b"definitely not a png")
    with pytest.raises(SignatureDecodeError):
        m.decode_signature(b"")


def test_decode_signature_converts_to_rgba(signature_png):
    buf = m.decode_signature(signature_png)
    assert buf.image.mode == "RGBA"
    assert (buf.width, buf.height) == (300, 100)


def test_data_url_round_trip(signature_png):
    url = "data:image/png;base64," + base64.b64encode(signature_png).decode("ascii")
    assert m.signature_bytes_from_data_url(url) == signature_png


@pytest.mark.parametrize("url", ["not a data url", "data:image/png;base64,@@@@", "data:text/plain;base64,AAAA"])
def test_data_url_invalid(url):
    with pytest.raises(SignatureDecodeError):
        m.signature_bytes_from_data_url(url)


def test_place_signature_stays_inside_area(signature_png):
    target = RenderTarget.from_base(Image.new("RGB", (1000, 1000), (255, 255, 255)))
    buf = m.process_signature(signature_png)
    m.place_signature(target, buf, 500, 500, 400, 100)
    ink = np.asarray(target.image.convert("L")) < 250
    ys, xs = np.nonzero(ink)
    assert xs.size > 0
    assert xs.min() >= 300 - 1 and xs.max() <= 700 + 1
    assert ys.min() >= 450 - 1 and ys.max() <= 550 + 1


def test_process_signature_thickens_thin_strokes(signature_png):
    raw = m.decode_signature(signature_png)
    thick = m.process_signature(signature_png)
    assert (_alpha(thick) > 0).sum() > (_alpha(raw) > 0).sum()


def test_signature_png_is_readable():
    buf = io.BytesIO()
    Image.new("RGBA", (4, 2), (0, 0, 0, 255)).save(buf, format="PNG")
    assert m.decode_signature(buf.getvalue()).width == 4
