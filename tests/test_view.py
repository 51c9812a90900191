from unittest import TestCase
import io
import os
import struct
import tempfile

from alignpy.bam import CigarOps
from alignpy.view import main

from .data import build_bai, build_bam, pack_record, tag

RECORDS = [
    pack_record(name=b'a', reference_id=0, position=100, mapping_quality=5, cigar=((4, CigarOps.MATCH),), sequence='ACGT',
                tags=tag(b'NM', b'i', struct.pack('<i', 1))),
    pack_record(name=b'b', reference_id=0, position=200, mapping_quality=60, cigar=((4, CigarOps.MATCH),), sequence='ACGT',
                quality=(30, 30, 30, 30)),
]


class TestView(TestCase):
    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.directory.name, 'sample.bam')
        data, voffsets, end = build_bam(RECORDS, (('chr1', 1000),))
        with open(self.path, 'wb') as stream:
            stream.write(data)
        with open(self.path + '.bai', 'wb') as stream:
            stream.write(build_bai([[(voffsets[0], end)]]))

    def tearDown(self):
        self.directory.cleanup()

    def run_view(self, *argv):
        out = io.StringIO()
        status = main(list(argv), out)
        return status, out.getvalue().splitlines()

    def test_print(self):
        status, lines = self.run_view(self.path)
        self.assertEqual(status, 0)
        self.assertEqual(lines, ["a\tchr1\t101\t+\t5\t4M\t0\tACGT\t*\tNM:1", "b\tchr1\t201\t+\t60\t4M\t0\tACGT\t????"])

    def test_skip_aux(self):
        status, lines = self.run_view('-x', self.path)
        self.assertEqual(lines[0], "a\tchr1\t101\t+\t5\t4M\t0\tACGT\t*")

    def test_count(self):
        self.assertEqual(self.run_view('-c', self.path), (0, ['2']))
        self.assertEqual(self.run_view('-c', '-q', '10', self.path), (0, ['1']))
        self.assertEqual(self.run_view('-c', '-s', '0', self.path), (0, ['2']))

    def test_regions(self):
        status, lines = self.run_view('-c', self.path, 'chr1:150-300', 'chr1:1-1000')
        self.assertEqual(status, 0)
        self.assertEqual(lines, ['3'])

    def test_errors(self):
        self.assertEqual(self.run_view()[0], 2)
        self.assertEqual(self.run_view('-s', 'half', self.path)[0], 2)
        self.assertEqual(self.run_view(self.path + '.missing')[0], 1)
        self.assertEqual(self.run_view(self.path, 'chrX:1-10')[0], 1)
