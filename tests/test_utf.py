"""Unit tests for UTF-8 encoding and decoding.

Tests verify:
- Byte layout of 1, 2, 3 and 4 byte sequences
- Surrogate pairs in the input are joined into one code point
- Malformed byte arrays raise InvalidFormatError
- BOM removal
"""
import unittest

from rtbase.errors import (
    ArgumentNullOrUndefinedError,
    InvalidFormatError,
    InvalidTypeError,
)
from rtbase.encoding.utf import (
    remove_utf8_bom,
    utf16_string_to_utf8_array,
    utf8_array_to_utf16_string,
)

SAMPLES = [
    "",
    "hello world",
    "Grüße aus Köln",
    "€100",
    "日本語テキスト",
    "emoji 😀 and 🎉",
    "\u0080\u07ff\u0800\uffff\U00010000\U0010ffff",
]


class TestUtf8Encode(unittest.TestCase):
    """Tests for utf16_string_to_utf8_array."""

    def test_ascii(self):
        text = "".join(chr(i) for i in range(128))
        self.assertEqual(utf16_string_to_utf8_array(text), list(range(128)))

    def test_two_byte_form(self):
        self.assertEqual(utf16_string_to_utf8_array("Aé"), [65, 195, 169])

    def test_first_two_byte_code_point(self):
        """U+0080 is the smallest code point that needs two bytes."""
        self.assertEqual(utf16_string_to_utf8_array("\u0080"), [0xC2, 0x80])

    def test_three_byte_form(self):
        self.assertEqual(utf16_string_to_utf8_array("€"), [0xE2, 0x82, 0xAC])

    def test_four_byte_form(self):
        self.assertEqual(utf16_string_to_utf8_array("😀"), [0xF0, 0x9F, 0x98, 0x80])

    def test_surrogate_pair_joined(self):
        """A UTF-16 surrogate pair encodes like the code point it stands for."""
        self.assertEqual(
            utf16_string_to_utf8_array("\ud83d\ude00"),
            [0xF0, 0x9F, 0x98, 0x80],
        )

    def test_lone_low_surrogate_skipped(self):
        self.assertEqual(utf16_string_to_utf8_array("a\udc00b"), [97, 98])

    def test_lone_high_surrogate_encoded(self):
        self.assertEqual(utf16_string_to_utf8_array("\ud800"), [0xED, 0xA0, 0x80])

    def test_matches_builtin_encoder(self):
        for text in SAMPLES:
            with self.subTest(text=text):
                self.assertEqual(utf16_string_to_utf8_array(text), list(text.encode("utf-8")))

    def test_empty_string(self):
        self.assertEqual(utf16_string_to_utf8_array(""), [])

    def test_none_rejected(self):
        with self.assertRaises(ArgumentNullOrUndefinedError):
            utf16_string_to_utf8_array(None)

    def test_non_string_rejected(self):
        with self.assertRaises(InvalidTypeError):
            utf16_string_to_utf8_array(123)
        with self.assertRaises(InvalidTypeError):
            utf16_string_to_utf8_array(b"bytes")


class TestUtf8Decode(unittest.TestCase):
    """Tests for utf8_array_to_utf16_string."""

    def test_round_trip(self):
        for text in SAMPLES:
            with self.subTest(text=text):
                encoded = utf16_string_to_utf8_array(text)
                self.assertEqual(utf8_array_to_utf16_string(encoded), text)

    def test_accepts_bytes(self):
        self.assertEqual(utf8_array_to_utf16_string(b"\xe2\x82\xac"), "€")
        self.assertEqual(utf8_array_to_utf16_string(bytearray(b"abc")), "abc")

    def test_accepts_tuple(self):
        self.assertEqual(utf8_array_to_utf16_string((0x48, 0x69)), "Hi")

    def test_empty(self):
        self.assertEqual(utf8_array_to_utf16_string([]), "")

    def test_five_byte_lead_rejected(self):
        with self.assertRaises(InvalidFormatError):
            utf8_array_to_utf16_string([0xF8, 0x88, 0x80, 0x80, 0x80])

    def test_six_byte_lead_rejected(self):
        with self.assertRaises(InvalidFormatError):
            utf8_array_to_utf16_string([0xFC, 0x84, 0x80, 0x80, 0x80, 0x80])

    def test_invalid_lead_bytes(self):
        for lead in (0xFE, 0xFF):
            with self.subTest(lead=lead):
                with self.assertRaises(InvalidFormatError):
                    utf8_array_to_utf16_string([lead])

    def test_stray_continuation_byte(self):
        with self.assertRaises(InvalidFormatError) as cm:
            utf8_array_to_utf16_string([0x41, 0x80])
        self.assertIn("position 1", str(cm.exception))

    def test_truncated_sequence(self):
        with self.assertRaises(InvalidFormatError):
            utf8_array_to_utf16_string([0xE2, 0x82])

    def test_bad_continuation_byte(self):
        with self.assertRaises(InvalidFormatError):
            utf8_array_to_utf16_string([0xC3, 0x41])

    def test_code_point_out_of_range(self):
        with self.assertRaises(InvalidFormatError):
            utf8_array_to_utf16_string([0xF7, 0xBF, 0xBF, 0xBF])

    def test_overlong_forms_rejected(self):
        """Sequences longer than the code point needs are not valid UTF-8."""
        for data in ([0xC0, 0x80], [0xC1, 0xBF], [0xE0, 0x80, 0x80], [0xE0, 0x9F, 0xBF], [0xF0, 0x80, 0x80, 0x80]):
            with self.subTest(data=data):
                with self.assertRaises(InvalidFormatError) as cm:
                    utf8_array_to_utf16_string(data)
                self.assertIn("Overlong", str(cm.exception))

    def test_shortest_forms_accepted(self):
        self.assertEqual(utf8_array_to_utf16_string([0xC2, 0x80]), "\u0080")
        self.assertEqual(utf8_array_to_utf16_string([0xE0, 0xA0, 0x80]), "\u0800")
        self.assertEqual(utf8_array_to_utf16_string([0xF0, 0x90, 0x80, 0x80]), "\U00010000")

    def test_lone_surrogate_round_trip(self):
        """An unpaired surrogate written by the encoder decodes back unchanged."""
        encoded = utf16_string_to_utf8_array("a\ud800b")
        self.assertEqual(encoded, [0x61, 0xED, 0xA0, 0x80, 0x62])
        self.assertEqual(utf8_array_to_utf16_string(encoded), "a\ud800b")

    def test_format_error_is_value_error(self):
        with self.assertRaises(ValueError):
            utf8_array_to_utf16_string([0xFF])

    def test_none_rejected(self):
        with self.assertRaises(ArgumentNullOrUndefinedError):
            utf8_array_to_utf16_string(None)

    def test_non_byte_values_rejected(self):
        with self.assertRaises(InvalidTypeError):
            utf8_array_to_utf16_string([256])
        with self.assertRaises(InvalidTypeError):
            utf8_array_to_utf16_string([-1])
        with self.assertRaises(InvalidTypeError):
            utf8_array_to_utf16_string("text")


class TestRemoveBom(unittest.TestCase):
    """Tests for remove_utf8_bom."""

    def test_decoded_bom(self):
        self.assertEqual(remove_utf8_bom("\ufeffabc"), "abc")

    def test_latin1_bom(self):
        self.assertEqual(remove_utf8_bom("\u00ef\u00bb\u00bfabc"), "abc")

    def test_no_bom(self):
        self.assertEqual(remove_utf8_bom("abc"), "abc")
        self.assertEqual(remove_utf8_bom(""), "")

    def test_only_leading_bom_removed(self):
        self.assertEqual(remove_utf8_bom("a\ufeffb"), "a\ufeffb")


if __name__ == "__main__":
    unittest.main()
