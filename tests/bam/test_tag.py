from unittest import TestCase
import struct

from alignpy.bam import parse_aux_fields
from alignpy.errors import DataLossError

from ..data import tag


class TestParseAuxFields(TestCase):
    def test_scalar_types(self):
        data = tag(b'XA', b'A', b'Q') \
               + tag(b'Xc', b'c', struct.pack('<b', -5)) \
               + tag(b'XC', b'C', struct.pack('<B', 250)) \
               + tag(b'Xs', b's', struct.pack('<h', -300)) \
               + tag(b'XS', b'S', struct.pack('<H', 60000)) \
               + tag(b'Xi', b'i', struct.pack('<i', -70000)) \
               + tag(b'XI', b'I', struct.pack('<I', 4000000000)) \
               + tag(b'Xf', b'f', struct.pack('<f', 0.5))
        info, error = parse_aux_fields(data)
        self.assertIsNone(error)
        self.assertEqual(info, {'XA': 'Q', 'Xc': -5, 'XC': 250, 'Xs': -300, 'XS': 60000, 'Xi': -70000, 'XI': 4000000000, 'Xf': 0.5})
        self.assertEqual(list(info), ['XA', 'Xc', 'XC', 'Xs', 'XS', 'Xi', 'XI', 'Xf'], "Tags must keep their file order")

    def test_strings(self):
        data = tag(b'RG', b'Z', b'group1\0') + tag(b'XH', b'H', b'1AE3\0') + tag(b'NM', b'C', b'\x02')
        info, error = parse_aux_fields(data)
        self.assertIsNone(error)
        self.assertEqual(info, {'RG': 'group1', 'NM': 2}, "H tags are consumed but not stored")

    def test_array_skipped(self):
        data = tag(b'XB', b'B', b's' + struct.pack('<I', 3) + struct.pack('<hhh', 1, 2, 3)) + tag(b'NM', b'i', struct.pack('<i', 7))
        info, error = parse_aux_fields(data)
        self.assertIsNone(error)
        self.assertEqual(info, {'NM': 7})

    def test_empty_array(self):
        data = tag(b'XB', b'B', b'f' + struct.pack('<I', 0)) + tag(b'NM', b'C', b'\x04')
        info, error = parse_aux_fields(data)
        self.assertIsNone(error, "Zero element arrays are accepted")
        self.assertEqual(info, {'NM': 4})

    def test_character_array(self):
        data = tag(b'XB', b'B', b'A' + struct.pack('<I', 2) + b'ab') + tag(b'NM', b'C', b'\x03')
        info, error = parse_aux_fields(data)
        self.assertIsNone(error)
        self.assertEqual(info, {'NM': 3})

    def test_non_ascii_string(self):
        data = tag(b'XZ', b'Z', 'café'.encode('utf-8') + b'\0') \
               + tag(b'XL', b'Z', b'\xff\xfe\0') \
               + tag(b'NM', b'i', struct.pack('<i', 3))
        info, error = parse_aux_fields(data)
        self.assertIsNone(error)
        self.assertEqual(info, {'XZ': 'café', 'XL': '\ufffd\ufffd', 'NM': 3})

    def test_offset_and_end(self):
        data = b'junk' + tag(b'NM', b'C', b'\x01') + tag(b'AS', b'C', b'\x09')
        info, error = parse_aux_fields(data, 4, 8)
        self.assertIsNone(error)
        self.assertEqual(info, {'NM': 1})

    def test_truncated_float(self):
        data = tag(b'XS', b's', struct.pack('<h', 12)) + tag(b'XF', b'f', b'\x00\x00')
        info, error = parse_aux_fields(data)
        self.assertEqual(info, {'XS': 12}, "Tags before the failure are kept")
        self.assertIsInstance(error, DataLossError)
        self.assertIn('XF', str(error))

    def test_unknown_type(self):
        info, error = parse_aux_fields(tag(b'NM', b'C', b'\x01') + tag(b'XQ', b'q', b'\x01'))
        self.assertEqual(info, {'NM': 1})
        self.assertIsInstance(error, DataLossError)
        self.assertIn('Unknown tag XQ', str(error))

    def test_unterminated_string(self):
        info, error = parse_aux_fields(tag(b'RG', b'Z', b'abc'))
        self.assertEqual(info, {})
        self.assertIsInstance(error, DataLossError)

    def test_array_overrun(self):
        info, error = parse_aux_fields(tag(b'XB', b'B', b'I' + struct.pack('<I', 4) + b'\x00' * 8))
        self.assertEqual(info, {})
        self.assertIsInstance(error, DataLossError)

    def test_unknown_array_type(self):
        info, error = parse_aux_fields(tag(b'XB', b'B', b'Z' + struct.pack('<I', 1) + b'\x00'))
        self.assertIsInstance(error, DataLossError)

    def test_truncated_header(self):
        info, error = parse_aux_fields(tag(b'NM', b'C', b'\x01') + b'X')
        self.assertEqual(info, {'NM': 1})
        self.assertIsInstance(error, DataLossError)
