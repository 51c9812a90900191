import ctypes as C
from enum import IntFlag

from .util import InvalidBGZF, MAX_BLOCK_SIZE

DEFLATE = 8
"""int: gzip compression method of every BGZF block."""


class BlockFlags(IntFlag):
    FTEXT = 1 << 0
    FHCRC = 1 << 1
    FEXTRA = 1 << 2
    FNAME = 1 << 3
    FCOMMENT = 1 << 4


class Header(C.LittleEndianStructure):
    """
    Fixed part of a gzip member header.
    """
    _pack_ = 1
    _fields_ = [
        ("id1", C.c_uint8),  # 31
        ("id2", C.c_uint8),  # 139
        ("compression_method", C.c_uint8),  # 8, deflate
        ("flag", C.c_uint8),  # FEXTRA must be set
        ("modification_time", C.c_uint32),
        ("extra_flags", C.c_uint8),
        ("os", C.c_uint8),
        ("extra_length", C.c_uint16),  # Total length of the subfields that follow
    ]


SIZEOF_HEADER = C.sizeof(Header)


class SubField(C.LittleEndianStructure):
    """
    Header of one gzip extra subfield, followed by SLEN bytes of data.
    """
    _pack_ = 1
    _fields_ = [
        ("SI1", C.c_uint8),
        ("SI2", C.c_uint8),
        ("SLEN", C.c_uint16),
    ]


SIZEOF_SUBFIELD = C.sizeof(SubField)


class Trailer(C.LittleEndianStructure):
    _pack_ = 1
    _fields_ = [
        ("CRC32", C.c_uint32),  # CRC32 of the uncompressed data
        ("uncompressed_size", C.c_uint32),  # ISIZE
    ]


SIZEOF_TRAILER = C.sizeof(Trailer)


def parse_extra(buffer) -> dict:
    """
    Split gzip extra data into its subfields.
    :param buffer: Buffer holding the XLEN bytes of extra data.
    :return: Dict of subfield data keyed on the two byte subfield identifier.
    """
    fields = {}
    offset = 0
    while offset + SIZEOF_SUBFIELD <= len(buffer):
        field = SubField.from_buffer_copy(buffer, offset)
        start = offset + SIZEOF_SUBFIELD
        fields[bytes((field.SI1, field.SI2))] = bytes(buffer[start:start + field.SLEN])
        offset = start + field.SLEN
    return fields


def block_size(extra_fields: dict) -> int:
    """
    Read the total size of a block from its BC subfield, which stores the size minus one.
    :param extra_fields: Dict returned from parse_extra().
    :return: Size of the block in bytes, header and trailer included.
    """
    bsize = extra_fields.get(b'BC')
    if not bsize or len(bsize) != 2:
        raise InvalidBGZF("Missing block size field.")
    return int.from_bytes(bsize, byteorder='little', signed=False) + 1


def _read_exactly(stream, size, what):
    buffer = bytearray(size)
    if stream.readinto(buffer) != size:
        raise InvalidBGZF("Truncated block {}.".format(what))
    return buffer


class Block:
    """
    One BGZF block: a gzip member whose BC extra subfield records the compressed size of the member.
    """
    __slots__ = 'header', 'extra_fields', 'trailer', 'size'

    def __init__(self, header: Header, extra_fields: dict, trailer: Trailer):
        self.header = header
        self.extra_fields = extra_fields
        self.trailer = trailer
        self.size = block_size(extra_fields)

    @property
    def CRC32(self) -> int:
        return self.trailer.CRC32

    @property
    def uncompressed_size(self) -> int:
        return self.trailer.uncompressed_size

    def __len__(self):
        return self.size

    @staticmethod
    def from_stream(stream) -> ('Block', memoryview):
        """
        Read one block.
        :param stream: Binary stream positioned on the first byte of a block (must have readinto() function).
        :return: Tuple containing (Block instance, memoryview of the compressed data). Raises EOFError if the stream is exhausted.
        """
        buffer = bytearray(SIZEOF_HEADER)
        length = stream.readinto(buffer)
        if length == 0:
            raise EOFError()
        if length != SIZEOF_HEADER:
            raise InvalidBGZF("Truncated block header.")
        header = Header.from_buffer(buffer)
        if (header.id1, header.id2) != (31, 139):
            raise InvalidBGZF("Invalid block header found: ID1: {} ID2: {}".format(header.id1, header.id2))
        if header.compression_method != DEFLATE or not header.flag & BlockFlags.FEXTRA:
            raise InvalidBGZF("Block is not a BGZF block, CM: {} FLG: {}".format(header.compression_method, header.flag))

        extra_fields = parse_extra(_read_exactly(stream, header.extra_length, "extra fields"))
        size = block_size(extra_fields)
        cdata_size = size - SIZEOF_HEADER - header.extra_length - SIZEOF_TRAILER
        if cdata_size < 0 or size > MAX_BLOCK_SIZE + 1:
            raise InvalidBGZF("Invalid block size {}.".format(size))
        cdata = memoryview(_read_exactly(stream, cdata_size, "data"))
        trailer = Trailer.from_buffer(_read_exactly(stream, SIZEOF_TRAILER, "trailer"))
        return Block(header, extra_fields, trailer), cdata
