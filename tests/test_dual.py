import numpy as np
import pytest

from twolqr import config
from twolqr.dual.decoder import decode_2lqr, decode_private
from twolqr.dual.encoder import encode_2lqr, encode_private, resolve_private_ecc
from twolqr.dual.modules import protected_mask
from twolqr.dual.patterns import NO_SYMBOL, render_image
from twolqr.errors import CapacityError, DecodeError, ValidationError
from twolqr.qr.matrix import encode_qr
from twolqr.qr.reader import decode_qr


def test_private_codeword_round_trip_with_errors():
    payload = b"private payload"
    codeword = encode_private(payload, 2)
    assert len(codeword) % 7 == 0 or len(codeword) % 7 > 2
    corrupted = list(codeword)
    # One symbol error in every block is within reach of two parity symbols.
    for start in range(0, len(corrupted), 7):
        corrupted[start] ^= 5
    assert decode_private(corrupted, 2) == payload


def test_resolve_private_ecc():
    assert resolve_private_ecc(None) == config.DEFAULTS.private_ecc_words
    assert resolve_private_ecc(4) == 4
    for bad in (0, 7, 2.0, True):
        with pytest.raises(ValidationError):
            resolve_private_ecc(bad)


def test_encode_places_symbols_on_black_data_modules():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    bitmap = result["bitmap"]
    pattern_map = result["pattern_map"]
    placed = pattern_map != NO_SYMBOL
    assert int(placed.sum()) == len(encode_private(b"hidden", 2))
    assert not (placed & protected_mask(result["version"])).any()
    assert (bitmap.black()[placed]).all()
    assert set(np.unique(pattern_map[placed]).tolist()) <= set(range(8))


def test_round_trip_public_and_private():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    image = render_image(result["bitmap"], result["pattern_map"])
    decoded = decode_2lqr(image, "shared-key", private_ecc_words=2)
    assert decoded["public_data"] == "HELLO WORLD"
    assert decoded["private_data"] == b"hidden"
    assert (decoded["version"], decoded["ecc"], decoded["mask"]) == (
        result["version"],
        result["ecc"],
        result["mask"],
    )
    # A plain reader still sees the public payload.
    assert decode_qr(image)["text"] == "HELLO WORLD"


def test_multi_block_private_payload_with_options():
    secret = "Meet at the north gate, 21:00. ✓".encode("utf-8")
    result = encode_2lqr(
        "https://example.org/2lqr",
        secret,
        b"\x00binary key\xff",
        ecc="low",
        version=5,
        mask=3,
        private_ecc_words=4,
    )
    assert result["version"] == 5
    assert result["mask"] == 3
    image = render_image(result["bitmap"], result["pattern_map"], module_pixels=10)
    decoded = decode_2lqr(image, b"\x00binary key\xff", private_ecc_words=4)
    assert decoded["public_data"] == "https://example.org/2lqr"
    assert decoded["private_data"] == secret


def test_private_channel_corrects_a_damaged_glyph():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    pattern_map = result["pattern_map"].copy()
    y, x = np.argwhere(pattern_map != NO_SYMBOL)[0]
    pattern_map[y, x] = (pattern_map[y, x] + 1) % 8
    image = render_image(result["bitmap"], pattern_map)
    decoded = decode_2lqr(image, "shared-key", private_ecc_words=2)
    assert decoded["private_data"] == b"hidden"


def test_wrong_key_does_not_reveal_the_secret():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    image = render_image(result["bitmap"], result["pattern_map"])
    try:
        decoded = decode_2lqr(image, "another-key", private_ecc_words=2)
    except DecodeError:
        return
    assert decoded["public_data"] == "HELLO WORLD"
    assert decoded["private_data"] != b"hidden"


def test_decode_requires_private_ecc_words():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    image = render_image(result["bitmap"], result["pattern_map"])
    with pytest.raises(ValidationError):
        decode_2lqr(image, "shared-key")


def test_plain_qr_has_no_private_stream():
    image = render_image(encode_qr("HELLO WORLD")["bitmap"])
    with pytest.raises(DecodeError):
        decode_2lqr(image, "shared-key", private_ecc_words=2)


def test_private_capacity_exceeded():
    with pytest.raises(CapacityError):
        encode_2lqr("HELLO WORLD", "x" * 200, "shared-key")


def test_stray_pixels_do_not_hide_either_channel():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    image = render_image(result["bitmap"], result["pattern_map"])
    image[20, 22] = 255
    image[2, 60] = 0
    decoded = decode_2lqr(image, "shared-key", private_ecc_words=2)
    assert decoded["public_data"] == "HELLO WORLD"
    assert decoded["private_data"] == b"hidden"


@pytest.mark.parametrize("secret", [b"hidden", b"hello world"])
def test_smaller_parity_length_is_rejected(secret):
    codeword = encode_private(secret, 2)
    with pytest.raises(DecodeError):
        decode_private(codeword, 1)


def test_decode_with_wrong_private_ecc_words_fails():
    result = encode_2lqr("HELLO WORLD", "hidden", "shared-key")
    image = render_image(result["bitmap"], result["pattern_map"])
    for wrong in (1, 3):
        with pytest.raises(DecodeError):
            decode_2lqr(image, "shared-key", private_ecc_words=wrong)


def test_numpy_integers_select_private_ecc():
    assert resolve_private_ecc(np.int64(3)) == 3
    assert type(resolve_private_ecc(np.int32(2))) is int
