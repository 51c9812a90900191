from unittest import TestCase
import io
import warnings

from alignpy.bgzf import EMPTY_BLOCK, InvalidBGZF, Reader, TruncatedFileWarning, make_virtual_offset

from ..data import bgzf_block


class TestReader(TestCase):
    def setUp(self):
        self.first = bgzf_block(b'hello ')
        self.second = bgzf_block(b'world')

    def test_read_across_blocks(self):
        reader = Reader(io.BytesIO(self.first + self.second + EMPTY_BLOCK))
        self.assertEqual(reader.read(11), b'hello world')
        self.assertEqual(reader.read(1), b'', "Extra data found")

    def test_empty_block(self):
        reader = Reader(io.BytesIO(EMPTY_BLOCK))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertEqual(reader.read(4), b'')
        self.assertEqual(caught, [])

    def test_missing_eof_marker(self):
        reader = Reader(io.BytesIO(self.first))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertEqual(reader.read(100), b'hello ')
            self.assertEqual(reader.read(1), b'')
        self.assertEqual(len(caught), 1, "Truncation must be reported once")
        self.assertTrue(issubclass(caught[0].category, TruncatedFileWarning))

    def test_tell(self):
        reader = Reader(io.BytesIO(self.first + self.second + EMPTY_BLOCK))
        self.assertEqual(reader.tell(), 0)
        reader.read(2)
        self.assertEqual(reader.tell(), make_virtual_offset(0, 2))
        reader.read(4)
        self.assertEqual(reader.tell(), make_virtual_offset(len(self.first), 0), "End of block is the start of the next")

    def test_seek(self):
        reader = Reader(io.BytesIO(self.first + self.second + EMPTY_BLOCK))
        reader.seek(make_virtual_offset(len(self.first), 2))
        self.assertEqual(reader.read(3), b'rld')
        reader.seek(0)
        self.assertEqual(reader.read(5), b'hello')

    def test_seek_outside_block(self):
        reader = Reader(io.BytesIO(self.first + EMPTY_BLOCK))
        with self.assertRaises(InvalidBGZF):
            reader.seek(make_virtual_offset(0, 100))

    def test_crc_mismatch(self):
        data = bytearray(self.first)
        data[-8] ^= 0xFF
        reader = Reader(io.BytesIO(bytes(data) + EMPTY_BLOCK))
        with self.assertRaises(InvalidBGZF):
            reader.read(1)
