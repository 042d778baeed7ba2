import numpy as np
import pytest

from twolqr.errors import CapacityError, DecodeError, ValidationError
from twolqr.gf.field import get_field
from twolqr.gf.rs import ReedSolomon

V1_DATA = [32, 9, 64] + [236, 17] * 8
V1_PARITY = [203, 10, 29, 40, 162, 45, 18]


def _corrupt(codeword, positions, rng, order):
    out = list(codeword)
    for pos in positions:
        out[pos] ^= int(rng.integers(1, order))
    return out


def test_gf256_parity_matches_reference_symbol():
    rs = ReedSolomon(get_field(8), 7)
    assert rs.encode(V1_DATA) == V1_PARITY
    assert rs.syndromes(V1_DATA + V1_PARITY) == [0] * 7


def test_clean_codeword_is_returned_unchanged():
    rs = ReedSolomon(get_field(8), 7)
    assert rs.decode(V1_DATA + V1_PARITY) == V1_DATA + V1_PARITY
    assert rs.decode_message(V1_DATA + V1_PARITY) == V1_DATA


@pytest.mark.parametrize("ecc_symbols", [2, 7, 10, 16])
def test_gf256_corrects_up_to_half_the_parity(ecc_symbols):
    field = get_field(8)
    rs = ReedSolomon(field, ecc_symbols)
    rng = np.random.default_rng(ecc_symbols)
    message = rng.integers(0, 256, size=30).tolist()
    codeword = message + rs.encode(message)
    for errors in range(ecc_symbols // 2 + 1):
        positions = rng.choice(len(codeword), size=errors, replace=False)
        received = _corrupt(codeword, positions, rng, field.order)
        assert rs.decode(received) == codeword


@pytest.mark.parametrize("ecc_symbols", [2, 3, 4])
def test_gf8_corrects_single_block(ecc_symbols):
    field = get_field(3)
    rs = ReedSolomon(field, ecc_symbols)
    rng = np.random.default_rng(100 + ecc_symbols)
    for _ in range(20):
        message = rng.integers(0, 8, size=7 - ecc_symbols).tolist()
        codeword = message + rs.encode(message)
        positions = rng.choice(7, size=ecc_symbols // 2, replace=False)
        received = _corrupt(codeword, positions, rng, field.order)
        assert rs.decode_message(received) == message


def test_short_gf8_block_is_shortened_code():
    rs = ReedSolomon(get_field(3), 2)
    message = [5]
    codeword = message + rs.encode(message)
    assert len(codeword) == 3
    received = list(codeword)
    received[0] ^= 3
    assert rs.decode(received) == codeword


def test_too_many_errors_are_never_silently_accepted():
    field = get_field(8)
    rs = ReedSolomon(field, 4)
    message = list(range(1, 21))
    codeword = message + rs.encode(message)
    received = list(codeword)
    for pos in (0, 3, 7, 11, 15):
        received[pos] ^= 0x5A
    # Beyond the correction radius the decoder either rejects the word or
    # lands on a different codeword; it never returns the original.
    try:
        corrected = rs.decode(received)
    except DecodeError:
        return
    assert corrected != codeword
    assert rs.syndromes(corrected) == [0] * 4


def test_block_length_limits():
    rs = ReedSolomon(get_field(3), 2)
    with pytest.raises(CapacityError):
        rs.encode([1, 2, 3, 4, 5, 6])
    with pytest.raises(DecodeError):
        rs.decode([0] * 8)
    with pytest.raises(DecodeError):
        rs.decode([1, 2])


def test_invalid_inputs_raise_validation_error():
    with pytest.raises(ValidationError):
        ReedSolomon(get_field(3), 0)
    with pytest.raises(ValidationError):
        ReedSolomon(get_field(3), 7)
    rs = ReedSolomon(get_field(3), 2)
    with pytest.raises(ValidationError):
        rs.encode([])
    with pytest.raises(ValidationError):
        rs.encode([8])
