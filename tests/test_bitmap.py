import numpy as np
import pytest

from twolqr.qr.bitmap import BLACK, UNSET, WHITE, Bitmap


def test_new_bitmap_is_unset():
    bm = Bitmap(3, 4)
    assert (bm.height, bm.width) == (3, 4)
    assert not bm.is_drawn()
    assert (bm.data == UNSET).all()
    with pytest.raises(RuntimeError):
        bm.assert_drawn()


def test_rect_wraps_negative_origin_and_clips():
    bm = Bitmap(5, fill=False)
    bm.rect(-2, -2, 4, 4, True)
    expected = np.zeros((5, 5), dtype=np.int8)
    expected[3:, 3:] = BLACK
    np.testing.assert_array_equal(bm.data, expected)


def test_embed_and_slice():
    inner = Bitmap.from_string("XX\n X\n")
    bm = Bitmap(4, fill=False).embed(1, 2, inner)
    assert bm.rect_slice(1, 2, 2, 2) == inner
    assert bm.to_string() == "    \n    \n XX \n  X "


def test_string_round_trip_keeps_unset_cells():
    text = "X ?\n?X \n"
    bm = Bitmap.from_string(text)
    assert bm.to_string() == "X ?\n?X "
    assert bm.data[0, 2] == UNSET
    with pytest.raises(ValueError):
        Bitmap.from_string("XO")


def test_border_scale_and_transpose():
    bm = Bitmap.from_string("X \n  \n")
    bordered = bm.border(1, False)
    assert (bordered.height, bordered.width) == (4, 4)
    assert bordered.data[1, 1] == BLACK
    assert bordered.data[0, 0] == WHITE
    assert Bitmap(1).border().height == 5

    scaled = bm.scale(2)
    assert scaled.black().sum() == 4
    np.testing.assert_array_equal(scaled.black()[:2, :2], np.ones((2, 2), dtype=bool))
    assert bm.transpose().to_string() == "X \n  "
    with pytest.raises(ValueError):
        bm.scale(0)
    with pytest.raises(ValueError):
        bm.border(-1)


def test_copy_is_independent():
    bm = Bitmap(2, fill=True)
    other = bm.copy()
    other.data[0, 0] = WHITE
    assert bm != other
    assert bm.data[0, 0] == BLACK


def test_to_ascii_uses_half_blocks():
    bm = Bitmap.from_string("X X \nXX  \n X X\n")
    # Rows 0/1 pair up; row 2 pairs with an implicit black row.
    assert bm.to_ascii() == " ▀▄█\n▀ ▀ \n"


def test_to_list_and_term():
    bm = Bitmap.from_string("X \n X\n")
    assert bm.to_list() == [[True, False], [False, True]]
    term = bm.to_term()
    assert term.count("\x1b[40m") == 2
    assert term.count("\x1b[1;47m") == 2
    assert term.count("\n") == 1
