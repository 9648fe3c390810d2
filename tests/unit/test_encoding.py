# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

import unittest

from sealvault.encoding.text import decode_base64url, encode_base64url
from sealvault.encoding.varint import decode_uvarint, encode_uvarint


class TestBase64Url(unittest.TestCase):
    def test_no_padding_and_urlsafe_alphabet(self) -> None:
        token = encode_base64url(b"\xfb\xff\xfe")
        self.assertEqual(token, "-__-")
        self.assertEqual(encode_base64url(b"a"), "YQ")

    def test_decode_accepts_unpadded_and_whitespace(self) -> None:
        self.assertEqual(decode_base64url("YQ"), b"a")
        self.assertEqual(decode_base64url("YW\nJj"), b"abc")
        self.assertEqual(decode_base64url(""), b"")

    def test_decode_rejects_invalid(self) -> None:
        for token in ("Y", "a*bc", "ab$d", 123):
            with self.subTest(token=token):
                with self.assertRaises(ValueError):
                    decode_base64url(token)  # type: ignore[arg-type]


class TestVarint(unittest.TestCase):
    def test_encode_known_values(self) -> None:
        self.assertEqual(encode_uvarint(0), b"\x00")
        self.assertEqual(encode_uvarint(127), b"\x7f")
        self.assertEqual(encode_uvarint(128), b"\x80\x01")
        self.assertEqual(encode_uvarint(100_000), b"\xa0\x8d\x06")

    def test_decode_returns_next_offset(self) -> None:
        data = b"\xff" + encode_uvarint(300) + b"tail"
        value, idx = decode_uvarint(data, 1)
        self.assertEqual(value, 300)
        self.assertEqual(data[idx:], b"tail")

    def test_max_value(self) -> None:
        encoded = encode_uvarint((1 << 64) - 1)
        self.assertEqual(decode_uvarint(encoded, 0), ((1 << 64) - 1, len(encoded)))
        with self.assertRaises(ValueError):
            encode_uvarint(1 << 64)
        with self.assertRaises(ValueError):
            encode_uvarint(-1)

    def test_decode_errors(self) -> None:
        cases = {
            "truncated": (b"\x80", "truncated varint"),
            "non-canonical": (b"\x80\x00", "non-canonical varint"),
            "too large": (b"\xff" * 9 + b"\x02", "varint too large"),
        }
        for label, (data, message) in cases.items():
            with self.subTest(case=label):
                with self.assertRaisesRegex(ValueError, message):
                    decode_uvarint(data, 0)
        with self.assertRaises(ValueError):
            decode_uvarint(b"\x00", -1)


if __name__ == "__main__":
    unittest.main()
