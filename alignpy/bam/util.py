import ctypes as C
from enum import IntEnum, IntFlag
from typing import Tuple

SIZEOF_INT32 = C.sizeof(C.c_int32)

MAGIC = b'BAM\x01'
"""bytes: Magic bytes identifying BAM data"""

OP_CODES = tuple(b"MIDNSHP=X"[i:i + 1] for i in range(9))
"""tuple: ASCII encoded CIGAR operations indexed by their numeric op codes."""

SEQUENCE_VALUES = tuple(b"=ACMGRSVTWYHKDBN"[i:i + 1] for i in range(16))
"""tuple: ASCII encoded sequence values indexed by their numeric code."""

MISSING_QUALITY = 0xFF
"""int: Value of the first quality byte when a record carries no quality scores."""


class CigarOps(IntEnum):
    """Enum of numeric CIGAR operations."""
    MATCH = 0 # M
    INS = 1 # I
    DEL = 2 # D
    REF_SKIP = 3 # N
    SOFT_CLIP = 4 # S
    HARD_CLIP = 5 # H
    PAD = 6 # P
    EQUAL = 7 # =
    DIFF = 8 # X


class RecordFlags(IntFlag):
    """
    Represents flag bit values. Can be OR'd (|) together or AND (&) to determine flag setting.
    """
    MULTISEG = 1 << 0  # template having multiple segments in sequencing
    ALIGNED = 1 << 1  # each segment properly aligned according to the aligner
    UNMAPPED = 1 << 2  # segment unmapped
    MATE_UNMAPPED = 1 << 3  # next segment in the template unmapped
    REVERSE_COMPLIMENTED = 1 << 4  # SEQ being reverse complemented
    MATE_REVERSED = 1 << 5  # SEQ of the next segment in the template being reversed
    READ1 = 1 << 6  # the first segment in the template
    READ2 = 1 << 7  # the last segment in the template
    SECONDARY = 1 << 8  # secondary alignment
    QCFAIL = 1 << 9  # not passing quality controls
    DUPLICATE = 1 << 10  # PCR or optical duplicate
    SUPPLEMENTARY = 1 << 11  # supplementary alignment


CONSUMES_REFERENCE = tuple(op in b"MDN=X" for op in b"MIDNSHP=X")
"""tuple: Boolean values ordered by op code indicating if op consumes a reference position."""


def is_bam(buffer, offset=0):
    """
    Helper to determine if passed buffer contains BAM data.
    :param buffer: Buffer containing unknown data.
    :param offset: Offset into buffer to being reading.
    :return: True if offset points to the BAM magic bytes, False otherwise.
    """
    return bytes(buffer[offset:offset + 4]) == MAGIC


class InvalidBAM(ValueError):
    """
    Exception to indicate invalid or unexpected data was read while trying to parse BAM formatted data.
    """
    pass


class BufferUnderflow(ValueError):
    """
    Exception to indicate that the buffer being read does not contain enough data to finish reading a unit of BAM formatted data.
    """
    pass


def _read_int32(stream) -> int:
    value = stream.read(SIZEOF_INT32)
    if len(value) != SIZEOF_INT32:
        raise InvalidBAM("Truncated BAM header.")
    return int.from_bytes(value, byteorder='little', signed=True)


def header_from_stream(stream, _magic=None) -> Tuple[bytes, list, list]:
    """
    Read in BAM header data.
    The SAM formatted text is returned undecoded, the reference arrays are the structured copy stored after it.
    :param stream: Stream containing header data (must have read() function).
    :param _magic: Data consumed from stream while peeking. Skips reading the magic bytes when given.
    :return: Tuple containing (bytes of SAM formatted header text, list of reference names, list of reference lengths)
    """
    magic = _magic or stream.read(4)
    if not is_bam(magic):
        raise InvalidBAM("Invalid BAM header found.")

    header_length = _read_int32(stream)  # l_text Length of the header text, including any NUL padding int32 t
    if header_length < 0:
        raise InvalidBAM("Negative header text length.")
    text = stream.read(header_length)  # text Plain header text in SAM; not necessarily NUL-terminated char[l text]
    if len(text) != header_length:
        raise InvalidBAM("Truncated BAM header.")

    ref_count = _read_int32(stream)  # n_ref # reference sequences int32 t
    names, lengths = [], []
    for _ in range(ref_count):
        length = _read_int32(stream)  # l_name Length of the reference name plus 1 (including NUL) int32 t
        name = stream.read(length)  # name Reference sequence name; NUL-terminated char[l name]
        if length < 1 or len(name) != length:
            raise InvalidBAM("Truncated reference name.")
        names.append(name[:-1].decode('ASCII'))
        lengths.append(_read_int32(stream))  # l_ref Length of the reference sequence int32 t
    return bytes(text), names, lengths


def alignment_length(cigar):
    """
    Count number of reference consuming positions that CIGAR represents.
    :param cigar: Iterable returning tuples of the form (op length, op).
    :return: Total alignment length of CIGAR.
    """
    total = 0
    for count, op in cigar:
        if op < len(CONSUMES_REFERENCE) and CONSUMES_REFERENCE[op]:
            total += count
    return total


def reg2bins(beg, end):
    """
    Calculate the list of bins that may overlap with region [beg,end) (zero-based)
    Adapted directly from the SAMv1 format document.
    :param beg:
    :param end:
    :return:
    """
    end -= 1
    bins = [0]
    for k in range(1 + (beg >> 26), 2 + (end >> 26)): bins.append(k)
    for k in range(9 + (beg >> 23), 10 + (end >> 23)): bins.append(k)
    for k in range(73 + (beg >> 20), 74 + (end >> 20)): bins.append(k)
    for k in range(585 + (beg >> 17), 586 + (end >> 17)): bins.append(k)
    for k in range(4681 + (beg >> 14), 4682 + (end >> 14)): bins.append(k)
    return bins
