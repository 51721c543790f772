import json

import pytest

from app.core.errors import ValidationError
from app.services.seat_codec import decode_seats, encode_seats, format_seats, parse_seat_selection


class TestDecodeSeats:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('["A1","A2"]', ["A1", "A2"]),
            ("A1,A2", ["A1", "A2"]),
            ("A1, A2 ,", ["A1", "A2"]),
            ("[A1, A2]", ["A1", "A2"]),
            ("A1", ["A1"]),
            ('"B7"', ["B7"]),
            ("12", ["12"]),
            (["C3", " C4 "], ["C3", "C4"]),
            (b'["D1"]', ["D1"]),
        ],
    )
    def test_accepts_stored_formats(self, raw, expected):
        assert decode_seats(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "[]", "null", "{}", "true", '{"a": 1}', 3.5])
    def test_unusable_input_decodes_to_empty(self, raw):
        assert decode_seats(raw) == []

    def test_non_string_entries_are_dropped(self):
        assert decode_seats('["A1", null, true, {"x": 1}, 7, ""]') == ["A1", "7"]

    def test_garbage_never_raises(self):
        for raw in ['["A1"', "[[[", '"', ",,,", "\x00\x01", "{[}]"]:
            assert isinstance(decode_seats(raw), list)


class TestEncodeSeats:
    def test_produces_json_array(self):
        text = encode_seats(["A1", "A2"])
        assert json.loads(text) == ["A1", "A2"]

    def test_decode_restores_order(self):
        seats = ["C10", "A1", "B5"]
        assert decode_seats(encode_seats(seats)) == seats

    def test_empty_selection_rejected(self):
        with pytest.raises(ValidationError, match="At least one seat"):
            encode_seats([])

    def test_duplicate_seat_rejected(self):
        with pytest.raises(ValidationError, match="A1 selected more than once"):
            encode_seats(["A1", "A2", "A1"])

    def test_overlong_seat_id_rejected(self):
        with pytest.raises(ValidationError, match="longer than 20 characters"):
            encode_seats(["A1", "B" * 21])

    def test_seat_id_at_column_width_is_accepted(self):
        assert json.loads(encode_seats(["C" * 20])) == ["C" * 20]

    def test_plain_string_is_a_type_error(self):
        with pytest.raises(TypeError):
            encode_seats("A1,A2")


class TestParseSeatSelection:
    def test_list(self):
        assert parse_seat_selection(["A1", "A2"]) == ["A1", "A2"]

    def test_comma_string(self):
        assert parse_seat_selection("A1, A2") == ["A1", "A2"]

    def test_json_string(self):
        assert parse_seat_selection('["A1"]') == ["A1"]

    @pytest.mark.parametrize("raw", [None, "", [], "[]"])
    def test_nothing_selected(self, raw):
        with pytest.raises(ValidationError):
            parse_seat_selection(raw)


def test_format_seats_joins_for_display():
    assert format_seats('["A1","A2"]') == "A1, A2"
    assert format_seats(None) == ""
