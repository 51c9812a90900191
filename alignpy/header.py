"""
Decoding of the SAM header text into structured metadata.

Classes:
    HeaderMetadata: Everything known about the file from its header.
    ReadGroup: One @RG line.
    Program: One @PG line.
    SortingOrder: Values of the @HD SO tag.
    AlignmentGrouping: Values of the @HD GO tag.
    HeaderWarning: Category of warnings emitted for header content that is ignored or defaulted.

Functions:
    decode_header: Build HeaderMetadata from header text and the reference arrays.
"""

import re
import warnings
from enum import IntEnum

from .errors import DataLossError
from .reference import ContigInfo
from .util import Slotted

HEADER_TAG = '@HD'
REFERENCE_SEQUENCE_TAG = '@SQ'
READ_GROUP_TAG = '@RG'
PROGRAM_TAG = '@PG'
COMMENT_TAG = '@CO'

TAG_LENGTH = 3
"""int: Length of an attribute tag including its colon, ie. 'ID:'."""

_integer_re = re.compile(r'[+-]?[0-9]+')


class HeaderWarning(UserWarning):
    """
    Warning for header lines, tags or values that are not recognised and were ignored or replaced by a default.
    """
    pass


class SortingOrder(IntEnum):
    UNKNOWN = 0
    UNSORTED = 1
    QUERYNAME = 2
    COORDINATE = 3


class AlignmentGrouping(IntEnum):
    NONE = 0
    QUERY = 1
    REFERENCE = 2


SORTING_ORDERS = {
    'coordinate': SortingOrder.COORDINATE,
    'queryname': SortingOrder.QUERYNAME,
    'unknown': SortingOrder.UNKNOWN,
    'unsorted': SortingOrder.UNSORTED,
}

ALIGNMENT_GROUPINGS = {
    'none': AlignmentGrouping.NONE,
    'query': AlignmentGrouping.QUERY,
    'reference': AlignmentGrouping.REFERENCE,
}


class ReadGroup(Slotted):
    __slots__ = ('name', 'sequencing_center', 'description', 'date', 'flow_order', 'key_sequence', 'library_id', 'program_ids',
                 'predicted_insert_size', 'platform', 'platform_model', 'platform_unit', 'sample_id')

    def __init__(self, **fields):
        for name in self.__slots__:
            setattr(self, name, '')
        self.program_ids = []
        self.predicted_insert_size = 0
        for name, value in fields.items():
            setattr(self, name, value)


class Program(Slotted):
    __slots__ = 'id', 'name', 'command_line', 'prev_program_id', 'description', 'version'

    def __init__(self, **fields):
        for name in self.__slots__:
            setattr(self, name, '')
        for name, value in fields.items():
            setattr(self, name, value)


class HeaderMetadata(Slotted):
    """
    Structured view of a SAM header.
    Built once per Reader and shared read only by all of its iterators.
    """
    __slots__ = 'format_version', 'sorting_order', 'alignment_grouping', 'read_groups', 'programs', 'comments', 'contigs'

    def __init__(self):
        self.format_version = ''
        self.sorting_order = SortingOrder.UNKNOWN
        self.alignment_grouping = AlignmentGrouping.NONE
        self.read_groups = []
        self.programs = []
        self.comments = []
        self.contigs = []


# Attribute tags are compared including their trailing colon.
READ_GROUP_FIELDS = {
    'ID:': 'name',
    'CN:': 'sequencing_center',
    'DS:': 'description',
    'DT:': 'date',
    'FO:': 'flow_order',
    'KS:': 'key_sequence',
    'LB:': 'library_id',
    'PL:': 'platform',
    'PM:': 'platform_model',
    'PU:': 'platform_unit',
    'SM:': 'sample_id',
}

PROGRAM_FIELDS = {
    'ID:': 'id',
    'PN:': 'name',
    'CL:': 'command_line',
    'PP:': 'prev_program_id',
    'DS:': 'description',
    'VN:': 'version',
}


def _attributes(line):
    """
    Split a header line into (tag, value) pairs, skipping the leading record type token.
    :param line: str containing one header line.
    :return: Generator of (tag including colon, value) tuples.
    """
    for token in line.split('\t')[1:]:
        yield token[:TAG_LENGTH], token[TAG_LENGTH:]


def _add_header_line(line, header):
    for tag, value in _attributes(line):
        if tag == 'VN:':
            header.format_version = value
        elif tag == 'SO:':
            order = SORTING_ORDERS.get(value)
            if order is None:
                warnings.warn("Unknown sorting order, defaulting to unknown: {}".format(line), HeaderWarning)
                order = SortingOrder.UNKNOWN
            header.sorting_order = order
        elif tag == 'GO:':
            grouping = ALIGNMENT_GROUPINGS.get(value)
            if grouping is None:
                warnings.warn("Unknown alignment grouping, defaulting to none: {}".format(line), HeaderWarning)
                grouping = AlignmentGrouping.NONE
            header.alignment_grouping = grouping
        else:
            warnings.warn("Unknown tag {} in header line, ignoring: {}".format(tag, line), HeaderWarning)


def _read_group(line) -> ReadGroup:
    read_group = ReadGroup()
    for tag, value in _attributes(line):
        if tag in READ_GROUP_FIELDS:
            setattr(read_group, READ_GROUP_FIELDS[tag], value)
        elif tag == 'PG:':
            read_group.program_ids.append(value)
        elif tag == 'PI:':
            if not _integer_re.fullmatch(value):
                raise DataLossError("Invalid predicted insert size {!r} in RG line: {}".format(value, line))
            read_group.predicted_insert_size = int(value)
        else:
            warnings.warn("Unknown tag {} in RG line, ignoring: {}".format(tag, line), HeaderWarning)
    return read_group


def _program(line) -> Program:
    program = Program()
    for tag, value in _attributes(line):
        # Unrecognised PG tags are dropped without a warning, unlike RG.
        if tag in PROGRAM_FIELDS:
            setattr(program, PROGRAM_FIELDS[tag], value)
    return program


def decode_header(text, names=(), lengths=()) -> HeaderMetadata:
    """
    Build the header metadata of an alignment file.
    @SQ lines are not parsed, the contigs are taken from the structured reference arrays which BAM stores separately
    and which are authoritative for resolving record reference ids.
    :param text: SAM formatted header text as str or ASCII encoded bytes. NUL padding is ignored.
    :param names: Reference names in file order.
    :param lengths: Reference lengths in file order.
    :return: HeaderMetadata instance.
    """
    if isinstance(text, (bytes, bytearray, memoryview)):
        text = bytes(text).decode('ASCII', errors='replace')
    header = HeaderMetadata()
    for line in text.rstrip('\0').split('\n'):
        if not line:
            continue
        record_type = line[:3]
        if record_type == HEADER_TAG:
            _add_header_line(line, header)
        elif record_type == REFERENCE_SEQUENCE_TAG:
            continue
        elif record_type == READ_GROUP_TAG:
            header.read_groups.append(_read_group(line))
        elif record_type == PROGRAM_TAG:
            header.programs.append(_program(line))
        elif record_type == COMMENT_TAG:
            header.comments.append(line[4:])
        else:
            warnings.warn("Unrecognized SAM header type, ignoring: {}".format(line), HeaderWarning)

    for i, (name, length) in enumerate(zip(names, lengths)):
        header.contigs.append(ContigInfo(name, length, i))
    return header
