from unittest import TestCase
import struct
import warnings

import alignpy.convert as conversion
from alignpy.alignment import CigarOperation, CigarUnit, Position
from alignpy.bam import CigarOps, RawRecord
from alignpy.convert import AuxFieldWarning, convert
from alignpy.errors import DataLossError
from alignpy.options import AuxFieldHandling, ReaderOptions
from alignpy.reference import ContigInfo

from .data import pack_record, raw_record, tag

CONTIGS = [ContigInfo('chr1', 1000, 0), ContigInfo('chr2', 2000, 1)]
PARSE_ALL = ReaderOptions(aux_field_handling=AuxFieldHandling.PARSE_ALL_AUX_FIELDS)


class TestConvert(TestCase):
    def setUp(self):
        conversion._aux_warnings = 0

    def test_unmapped(self):
        read = convert(raw_record(name=b'u1', flag=0x4, sequence='ACGT', quality=(30, 31, 32, 33)), CONTIGS)
        self.assertEqual(read.fragment_name, 'u1')
        self.assertIsNone(read.alignment)
        self.assertFalse(read.is_mapped)
        self.assertEqual(read.aligned_sequence, 'ACGT')
        self.assertEqual(read.aligned_quality, [30, 31, 32, 33])
        self.assertEqual(len(read.aligned_quality), len(read.aligned_sequence))

    def test_missing_quality(self):
        read = convert(raw_record(flag=0x4, sequence='ACG'), CONTIGS)
        self.assertEqual(read.aligned_sequence, 'ACG')
        self.assertIsNone(read.aligned_quality)

    def test_empty_sequence(self):
        read = convert(raw_record(flag=0x4), CONTIGS)
        self.assertEqual(read.aligned_sequence, '')
        self.assertIsNone(read.aligned_quality)

    def test_mapped(self):
        read = convert(raw_record(flag=0x10, reference_id=1, position=41, mapping_quality=37,
                                  cigar=((10, CigarOps.MATCH), (2, CigarOps.INS), (5, CigarOps.MATCH))), CONTIGS)
        alignment = read.alignment
        self.assertEqual(alignment.mapping_quality, 37)
        self.assertEqual(alignment.position, Position('chr2', 41, True))
        self.assertEqual(alignment.cigar, [CigarUnit(CigarOperation.ALIGNMENT_MATCH, 10), CigarUnit(CigarOperation.INSERT, 2),
                                           CigarUnit(CigarOperation.ALIGNMENT_MATCH, 5)])
        self.assertEqual(alignment.reference_length, 15)

    def test_mapped_without_reference(self):
        read = convert(raw_record(reference_id=-1, mapping_quality=5), CONTIGS)
        self.assertIsNotNone(read.alignment)
        self.assertIsNone(read.alignment.position)

    def test_flags(self):
        read = convert(raw_record(flag=0x2 | 0x100 | 0x200 | 0x400 | 0x800 | 0x4), CONTIGS)
        self.assertTrue(read.proper_placement)
        self.assertTrue(read.secondary_alignment)
        self.assertTrue(read.failed_vendor_quality_checks)
        self.assertTrue(read.duplicate_fragment)
        self.assertTrue(read.supplementary_alignment)

    def test_read_numbers(self):
        first = convert(raw_record(flag=0x1 | 0x8 | 0x4 | 0x40), CONTIGS)
        second = convert(raw_record(flag=0x1 | 0x8 | 0x4 | 0x80), CONTIGS)
        single = convert(raw_record(flag=0x4 | 0x80), CONTIGS)
        self.assertEqual((first.read_number, first.number_reads), (0, 2))
        self.assertEqual((second.read_number, second.number_reads), (1, 2))
        self.assertEqual((single.read_number, single.number_reads), (0, 1))

    def test_mate(self):
        read = convert(raw_record(flag=0x1 | 0x4 | 0x20, next_reference_id=0, next_position=500), CONTIGS)
        self.assertEqual(read.next_mate_position, Position('chr1', 500, True))
        unpaired = convert(raw_record(flag=0x4, next_reference_id=0, next_position=500), CONTIGS)
        self.assertIsNone(unpaired.next_mate_position)

    def test_mate_mapped_without_reference(self):
        with self.assertRaises(DataLossError):
            convert(raw_record(flag=0x1 | 0x4, next_reference_id=-1), CONTIGS)

    def test_mate_unknown_reference(self):
        with self.assertRaises(DataLossError):
            convert(raw_record(flag=0x1 | 0x4, next_reference_id=5), CONTIGS)

    def test_unknown_cigar_op(self):
        with self.assertRaises(DataLossError):
            convert(raw_record(reference_id=0, position=0, cigar=((4, 9),)), CONTIGS)

    def test_truncated_data(self):
        record = RawRecord.from_buffer(pack_record(flag=0x4, sequence='ACGT'))
        record.header.sequence_length = 100
        with self.assertRaises(DataLossError):
            convert(record, CONTIGS)

    def test_aux_fields(self):
        record = raw_record(flag=0x4, tags=tag(b'NM', b'i', struct.pack('<i', 3)) + tag(b'RG', b'Z', b'g1\0'))
        self.assertEqual(convert(record, CONTIGS, PARSE_ALL).info, {'NM': 3, 'RG': 'g1'})
        self.assertEqual(convert(record, CONTIGS, ReaderOptions(aux_field_handling=AuxFieldHandling.SKIP_AUX_FIELDS)).info, {})
        self.assertEqual(convert(record, CONTIGS).info, {})

    def test_aux_failure_warns_once(self):
        record = raw_record(flag=0x4, tags=tag(b'XS', b's', struct.pack('<h', 12)) + tag(b'XF', b'f', b'\x00\x00'))
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            read = convert(record, CONTIGS, PARSE_ALL)
            again = convert(record, CONTIGS, PARSE_ALL)
        self.assertEqual(read.info, {'XS': 12})
        self.assertEqual(again.info, {'XS': 12})
        aux_warnings = [w for w in caught if issubclass(w.category, AuxFieldWarning)]
        self.assertEqual(len(aux_warnings), 1)

    def test_idempotent(self):
        record = raw_record(name=b'r', flag=0x1 | 0x2 | 0x40, reference_id=0, position=10, mapping_quality=20,
                            cigar=((4, CigarOps.MATCH),), sequence='ACGT', quality=(1, 2, 3, 4), next_reference_id=1,
                            next_position=30, template_length=40, tags=tag(b'NM', b'C', b'\x00'))
        first = convert(record, CONTIGS, PARSE_ALL)
        second = convert(record, CONTIGS, PARSE_ALL)
        self.assertEqual(first, second)
        self.assertIsNot(first, second)
