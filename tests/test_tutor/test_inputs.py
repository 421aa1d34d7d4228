"""
Tests for learner cell input parsing.
"""

import pytest
import numpy as np

from simplex_tutor.tutor.inputs import (
    EMPTY,
    Empty,
    Partial,
    Value,
    parse_cell,
    coerce_cell,
    to_number,
    to_optional_number,
    is_blank,
    blank_row,
    encode_cell,
    decode_cell,
)


class TestParseCell:
    """Test the keystroke-level parser."""

    @pytest.mark.parametrize("text", ["-", "+", ".", "-."])
    def test_partials(self, text):
        assert parse_cell(text) == Partial(text)

    @pytest.mark.parametrize("text,number", [
        ("3", 3.0), ("-2.5", -2.5), ("3.", 3.0), (".5", 0.5), ("1e3", 1000.0), (" 7 ", 7.0),
    ])
    def test_numbers(self, text, number):
        assert parse_cell(text) == Value(number)

    def test_blank(self):
        assert parse_cell("") == EMPTY
        assert parse_cell("   ") == EMPTY

    def test_garbage_keeps_current(self):
        assert parse_cell("2x", Value(2.0)) == Value(2.0)
        assert parse_cell("abc") == EMPTY
        assert parse_cell("1e", Partial("1")) == Partial("1")


class TestCoerceCell:
    """Test conversion of submitted values."""

    def test_numbers(self):
        assert coerce_cell(4) == Value(4.0)
        assert coerce_cell(np.float64(2.5)) == Value(2.5)
        assert coerce_cell(np.int64(3)) == Value(3.0)

    def test_none_and_cells(self):
        assert coerce_cell(None) == EMPTY
        assert coerce_cell(Partial("-")) == Partial("-")

    def test_strings(self):
        assert coerce_cell("") == EMPTY
        assert coerce_cell("1.5") == Value(1.5)
        assert coerce_cell("oops") == Partial("oops")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            coerce_cell(True)


class TestReaders:
    """Test numeric readings of cells."""

    def test_to_number(self):
        assert to_number(Value(2.0)) == 2.0
        assert to_number(EMPTY) == 0.0
        assert to_number(Partial("-")) == 0.0
        assert to_number(Partial(".")) == 0.0

    def test_to_optional_number(self):
        assert to_optional_number(EMPTY) is None
        assert to_optional_number(Partial("-")) is None
        assert to_optional_number(Value(-1.0)) == -1.0

    def test_blank_row(self):
        row = blank_row(3)
        assert row == [EMPTY, EMPTY, EMPTY]
        assert all(is_blank(c) for c in row)
        assert isinstance(row[0], Empty)


class TestSnapshotEncoding:
    """Test the JSON form of cells."""

    @pytest.mark.parametrize("cell", [EMPTY, Partial("-"), Partial("-."), Value(2.5)])
    def test_round_trip(self, cell):
        assert decode_cell(encode_cell(cell)) == cell

    def test_encoded_forms(self):
        assert encode_cell(EMPTY) == ""
        assert encode_cell(Partial(".")) == "."
        assert encode_cell(Value(3.0)) == 3.0
        assert decode_cell(None) == EMPTY
        assert decode_cell(4) == Value(4.0)
