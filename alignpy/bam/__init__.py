"""
This subpackage contains all of the code required to frame and decode BAM formatted data.

Classes:
    RawRecord: A BAM alignment record as stored in the file, core fields plus variable length data.
    RecordHeader: The fixed size core of a BAM alignment record.
    PackedCIGAR: Read only view of the packed CIGAR operations of a record.
    PackedSequence: Read only view of the 4 bit packed sequence of a record.
    CigarOps: Enum of numeric CIGAR operations.
    RecordFlags: Flag bit values of a record.

Functions:
    parse_aux_fields: Decode the optional fields of a record.
    header_from_stream: Read the BAM header text and reference arrays.
    is_bam: Check for the BAM magic bytes.

Constants:
    OP_CODES (tuple): ASCII encoded CIGAR operations indexed by their numeric op codes.
    SEQUENCE_VALUES (tuple): ASCII encoded sequence values indexed by their numeric code.
    CONSUMES_REFERENCE (tuple): Boolean values ordered by op code indicating if op consumes a reference position.

For more:
    >> help(alignpy.bam.record) for more information on the RawRecord object.
    >> help(alignpy.bam.packed_cigar) for more information on the PackedCIGAR object.
    >> help(alignpy.bam.packed_sequence) for more information on the PackedSequence object.
    >> help(alignpy.bam.tag) for more information on the optional field grammar.
    >> help(alignpy.bam.util) for more information on utility functions including functions to work with BAM header data.
"""

from .packed_cigar import PackedCIGAR
from .packed_sequence import PackedSequence
from .record import RawRecord, RecordHeader
from .tag import parse_aux_fields
from .util import CONSUMES_REFERENCE, MISSING_QUALITY, OP_CODES, SEQUENCE_VALUES, BufferUnderflow, CigarOps, \
    InvalidBAM, RecordFlags, alignment_length, header_from_stream, is_bam
