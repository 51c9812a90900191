"""
Structured representation of decoded alignment records.

Classes:
    AlignmentRecord: One decoded read.
    LinearAlignment: Mapping quality, CIGAR and position of a mapped read.
    CigarUnit: One CIGAR operation and its length.
    CigarOperation: Enum of CIGAR operation kinds.
    Position: A strand aware 0-based coordinate on a named reference.
    Range: A 0-based half-open interval on a named reference.
"""

import re
from enum import IntEnum

from .bam.util import CigarOps, CONSUMES_REFERENCE
from .errors import InvalidArgumentError
from .util import Slotted


class CigarOperation(IntEnum):
    """Enum of CIGAR operation kinds."""
    OPERATION_UNSPECIFIED = 0
    ALIGNMENT_MATCH = 1  # M
    INSERT = 2  # I
    DELETE = 3  # D
    SKIP = 4  # N
    CLIP_SOFT = 5  # S
    CLIP_HARD = 6  # H
    PAD = 7  # P
    SEQUENCE_MATCH = 8  # =
    SEQUENCE_MISMATCH = 9  # X


OPERATIONS = (
    CigarOperation.ALIGNMENT_MATCH,
    CigarOperation.INSERT,
    CigarOperation.DELETE,
    CigarOperation.SKIP,
    CigarOperation.CLIP_SOFT,
    CigarOperation.CLIP_HARD,
    CigarOperation.PAD,
    CigarOperation.SEQUENCE_MATCH,
    CigarOperation.SEQUENCE_MISMATCH,
)
"""tuple: CigarOperation indexed by BAM op code (see alignpy.bam.CigarOps)."""

_CIGAR_CODES = {operation: CigarOps(code) for code, operation in enumerate(OPERATIONS)}


class CigarUnit(Slotted):
    __slots__ = 'operation', 'operation_length'

    def __init__(self, operation: CigarOperation, operation_length: int):
        self.operation = operation
        self.operation_length = operation_length

    @property
    def consumes_reference(self) -> bool:
        return CONSUMES_REFERENCE[_CIGAR_CODES[self.operation]]


class Position(Slotted):
    __slots__ = 'reference_name', 'position', 'reverse_strand'

    def __init__(self, reference_name: str, position: int, reverse_strand: bool = False):
        self.reference_name = reference_name
        self.position = position
        self.reverse_strand = reverse_strand


class LinearAlignment(Slotted):
    """
    How a mapped read lies on the reference.
    position is None for reads flagged mapped that carry no reference id.
    """
    __slots__ = 'mapping_quality', 'cigar', 'position'

    def __init__(self, mapping_quality: int = 0, cigar=None, position: Position = None):
        self.mapping_quality = mapping_quality
        self.cigar = cigar if cigar is not None else []
        self.position = position

    @property
    def reference_length(self) -> int:
        """
        Number of reference bases the alignment spans.
        :return: Sum of the lengths of all reference consuming operations.
        """
        return sum(unit.operation_length for unit in self.cigar if unit.consumes_reference)


class AlignmentRecord(Slotted):
    """
    A read decoded from an alignment file.

    info holds the decoded optional fields keyed on their two character tag, in the order they appear in the record.
    aligned_quality is None when the file stores no quality scores for the read.
    alignment is None for unmapped reads and next_mate_position is None unless the read is paired with a mapped mate.
    """
    __slots__ = ('fragment_name', 'fragment_length', 'proper_placement', 'duplicate_fragment', 'failed_vendor_quality_checks',
                 'secondary_alignment', 'supplementary_alignment', 'read_number', 'number_reads', 'aligned_sequence',
                 'aligned_quality', 'alignment', 'next_mate_position', 'info')

    def __init__(self):
        self.fragment_name = ''
        self.fragment_length = 0
        self.proper_placement = False
        self.duplicate_fragment = False
        self.failed_vendor_quality_checks = False
        self.secondary_alignment = False
        self.supplementary_alignment = False
        self.read_number = 0
        self.number_reads = 1
        self.aligned_sequence = ''
        self.aligned_quality = None
        self.alignment = None
        self.next_mate_position = None
        self.info = {}

    @property
    def is_mapped(self) -> bool:
        return self.alignment is not None

    def __str__(self):
        """
        Tab separated summary of the record, one column per field, used by tools/view.py.
        :return: str
        """
        if self.alignment is not None and self.alignment.position is not None:
            position = self.alignment.position
            location = "{}\t{}\t{}".format(position.reference_name, position.position + 1, '-' if position.reverse_strand else '+')
        else:
            location = "*\t0\t*"
        if self.alignment is not None and self.alignment.cigar:
            cigar = "".join("{}{}".format(unit.operation_length, "MIDNSHP=X"[OPERATIONS.index(unit.operation)]) for unit in self.alignment.cigar)
        else:
            cigar = '*'
        quality = ''.join(chr(q + 33) for q in self.aligned_quality) if self.aligned_quality is not None else '*'
        columns = [self.fragment_name, location, str(self.alignment.mapping_quality if self.alignment else 0), cigar,
                   str(self.fragment_length), self.aligned_sequence or '*', quality]
        columns.extend("{}:{}".format(tag, value) for tag, value in self.info.items())
        return "\t".join(columns)


_region_re = re.compile(r"^(?P<name>[^:]+)(?::(?P<start>[0-9,]+)(?:-(?P<end>[0-9,]+))?)?$")

MAX_REGION_END = 2 ** 31 - 1


class Range(Slotted):
    """
    A 0-based half-open interval [start, end) on a named reference.
    """
    __slots__ = 'reference_name', 'start', 'end'

    def __init__(self, reference_name: str, start: int = 0, end: int = MAX_REGION_END):
        self.reference_name = reference_name
        self.start = start
        self.end = end

    @staticmethod
    def parse(region: str) -> 'Range':
        """
        Parse a samtools style region string.
        Coordinates in the string are 1-based and inclusive and may contain thousands separators.
        "chr1" is the whole reference, "chr1:100" runs from base 100 to the end of the reference,
        "chr1:100-200" covers bases 100 to 200.
        :param region: Region string.
        :return: Range instance.
        """
        match = _region_re.match(region.strip())
        if not match:
            raise InvalidArgumentError("Invalid region {!r}".format(region))
        start = match.group('start')
        end = match.group('end')
        start = int(start.replace(',', '')) - 1 if start else 0
        end = int(end.replace(',', '')) if end else MAX_REGION_END
        if start < 0 or end < start:
            raise InvalidArgumentError("Invalid region {!r}".format(region))
        return Range(match.group('name'), start, end)
