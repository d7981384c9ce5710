"""Tests for pne.utils.codec: decode_payload, format_value, encode_payload."""

import pytest

from pne.errors import DecodeError
from pne.utils.codec import decode_payload, encode_payload, format_value


# --- decode_payload ---

class TestDecodePayload:
    def test_extracts_rate_and_mismatch(self):
        payload = "Org1 update: Lambda=1.5, Mismatch=0.75, end"
        assert decode_payload(payload) == (1.5, 0.75)

    def test_negative_values(self):
        assert decode_payload("Lambda=-2.25, Mismatch=-0.5, end") == (-2.25, -0.5)

    def test_integer_values(self):
        assert decode_payload("Lambda=3, Mismatch=0, end") == (3.0, 0.0)

    def test_text_between_and_after_fields_is_ignored(self):
        payload = "id=7 Lambda=1.25, org=Org1, Mismatch=0.125, end of message"
        assert decode_payload(payload) == (1.25, 0.125)

    def test_bytes_payload_decoded_as_utf8(self):
        assert decode_payload(b"Lambda=0.5, Mismatch=1.5, end") == (0.5, 1.5)

    def test_garbage_raises(self):
        with pytest.raises(DecodeError):
            decode_payload("garbage text with no markers")

    def test_empty_raises(self):
        with pytest.raises(DecodeError):
            decode_payload("")

    def test_empty_bytes_raises(self):
        with pytest.raises(DecodeError):
            decode_payload(b"")

    def test_missing_lambda_raises(self):
        with pytest.raises(DecodeError, match="Lambda"):
            decode_payload("Mismatch=0.5, end")

    def test_missing_mismatch_raises(self):
        with pytest.raises(DecodeError, match="Mismatch"):
            decode_payload("Lambda=0.5, end")

    def test_mismatch_without_end_marker_raises(self):
        with pytest.raises(DecodeError):
            decode_payload("Lambda=0.5, Mismatch=0.25")

    def test_non_numeric_value_raises(self):
        with pytest.raises(DecodeError):
            decode_payload("Lambda=abc, Mismatch=0.25, end")

    def test_empty_value_raises(self):
        with pytest.raises(DecodeError):
            decode_payload("Lambda=, Mismatch=0.25, end")

    def test_non_numeric_occurrence_skipped_for_later_lambda(self):
        payload = "Lambda=?, retry Lambda=1.5, Mismatch=0.5, end"
        assert decode_payload(payload) == (1.5, 0.5)

    def test_non_numeric_occurrence_skipped_for_later_mismatch(self):
        payload = "Lambda=1.5, Mismatch=?, retry Mismatch=0.5, end"
        assert decode_payload(payload) == (1.5, 0.5)

    def test_first_parseable_occurrence_wins(self):
        assert decode_payload("Lambda=1, Lambda=2, Mismatch=3, end Mismatch=4, end") == (1.0, 3.0)

    def test_all_occurrences_unparseable_raises(self):
        with pytest.raises(DecodeError, match="not a decimal number"):
            decode_payload("Lambda=?, again Lambda=x, Mismatch=0.5, end")

    def test_unicode_digits_rejected_in_mismatch(self):
        with pytest.raises(DecodeError, match="Mismatch"):
            decode_payload("Lambda=0.5, Mismatch=١, end")

    @pytest.mark.parametrize("value", ["inf", "nan", "1e5", "1_000", " 1.0", "1.2.3", "--1", "١٢"])
    def test_values_float_would_accept_are_rejected(self, value):
        with pytest.raises(DecodeError):
            decode_payload(f"Lambda={value}, Mismatch=0.25, end")

    def test_overflowing_value_raises(self):
        with pytest.raises(DecodeError, match="out of range"):
            decode_payload(f"Lambda=1{'0' * 400}, Mismatch=0.25, end")

    def test_invalid_utf8_raises(self):
        with pytest.raises(DecodeError, match="UTF-8"):
            decode_payload(b"Lambda=\xff, Mismatch=0.25, end")

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_payload("nothing here")


# --- format_value ---

class TestFormatValue:
    def test_simple_value(self):
        assert format_value(1.5) == "1.5"

    def test_small_value_has_no_exponent(self):
        assert format_value(1e-05) == "0.00001"

    def test_large_value_has_no_exponent(self):
        assert "e" not in format_value(1e16).lower()

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            format_value(float("nan"))

    def test_infinity_rejected(self):
        with pytest.raises(ValueError):
            format_value(float("inf"))


# --- encode/decode agreement ---

class TestRoundTrip:
    @pytest.mark.parametrize("rate, mismatch", [
        (1.5, 0.75),
        (0.1 + 0.2, -1 / 3),
        (2.9283746510293847, 0.049999999999999996),
        (1e-07, -123456.789),
    ])
    def test_decode_returns_exact_floats(self, rate, mismatch):
        assert decode_payload(encode_payload(rate, mismatch, prefix="SendUpdate: ")) == (rate, mismatch)
