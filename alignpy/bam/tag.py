"""
Decoding of the optional fields (tags) that follow the fixed fields of a BAM record.

Each tag is encoded as a two character name, a one character value type and a value whose layout depends on the type:

    A       one printable character
    cCsSiI  little endian integer of 1, 2 or 4 bytes, lower case is signed
    f       little endian IEEE-754 single precision float
    Z       NUL terminated printable string
    H       NUL terminated hex encoded byte array
    B       array: one element type character (AcCsSiIf), uint32 element count, then the elements
"""

import ctypes as C

from ..errors import DataLossError

SIZEOF_UINT32 = C.sizeof(C.c_uint32)
SIZEOF_CHAR = C.sizeof(C.c_char)

BTAG_TYPES = {
    b'c': C.c_int8,
    b'C': C.c_uint8,
    b's': C.c_int16.__ctype_le__,
    b'S': C.c_uint16.__ctype_le__,
    b'i': C.c_int32.__ctype_le__,
    b'I': C.c_uint32.__ctype_le__,
    b'f': C.c_float.__ctype_le__,
}
"""dict: ctypes type of each numeric tag and array element type."""

SIZEOF_TAG_TYPES = {k: C.sizeof(v) for k, v in BTAG_TYPES.items()}
SIZEOF_TAG_TYPES[b'A'] = SIZEOF_CHAR


class TagHeader(C.LittleEndianStructure):
    _pack_ = 1
    _fields_ = [
        ("tag", C.c_char * 2),  # tag Two-character tag char[2]
        ("value_type", C.c_char),  # val_type Value type: AcCsSiIfZHB char
    ]

    def __len__(self):
        return SIZEOF_TAGHEADER


SIZEOF_TAGHEADER = C.sizeof(TagHeader)


def _malformed(tag, reason):
    return DataLossError("Malformed tag {}: {}".format(tag, reason))


def parse_aux_fields(buffer, offset: int = 0, end: int = None):
    """
    Decode every tag in buffer[offset:end].
    Decoding stops at the first malformed tag. The tags decoded up to that point are still returned so the caller
    can decide what to do with a partially decoded record.
    'H' tags are consumed but not stored and the contents of 'B' arrays are skipped.
    :param buffer: Buffer containing BAM formatted tag data.
    :param offset: Offset into the buffer pointing at the first byte of the first tag.
    :param end: Offset one past the last byte of tag data, defaults to the end of buffer.
    :return: Tuple containing (dict of tag name to int, float or str, DataLossError instance or None if all tags decoded).
    """
    buffer = memoryview(buffer).cast('B')
    if end is None:
        end = len(buffer)
    info = {}
    while offset < end:
        if end - offset < SIZEOF_TAGHEADER:
            return info, _malformed(bytes(buffer[offset:end]).decode('latin-1'), "truncated tag header")
        header = TagHeader.from_buffer_copy(buffer, offset)
        tag = header.tag.decode('latin-1')
        value_type = header.value_type
        offset += SIZEOF_TAGHEADER

        if value_type == b'A':
            if end - offset < SIZEOF_CHAR:
                return info, _malformed(tag, "missing character value")
            info[tag] = chr(buffer[offset])
            offset += SIZEOF_CHAR
        elif value_type in BTAG_TYPES:
            size = SIZEOF_TAG_TYPES[value_type]
            if end - offset < size:
                return info, _malformed(tag, "{} value needs {} bytes".format(value_type.decode('ASCII'), size))
            info[tag] = BTAG_TYPES[value_type].from_buffer_copy(buffer, offset).value
            offset += size
        elif value_type in (b'Z', b'H'):
            start = offset
            while offset < end and buffer[offset]: offset += 1  # Seek to null terminator
            if offset >= end:
                return info, _malformed(tag, "missing NUL terminator")
            if value_type == b'Z':
                info[tag] = bytes(buffer[start:offset]).decode('utf-8', errors='replace')
            offset += 1
        elif value_type == b'B':
            if end - offset < SIZEOF_CHAR + SIZEOF_UINT32:
                return info, _malformed(tag, "truncated array header")
            array_type = bytes(buffer[offset:offset + SIZEOF_CHAR])
            offset += SIZEOF_CHAR
            if array_type not in SIZEOF_TAG_TYPES:
                return info, _malformed(tag, "unknown array element type {!r}".format(array_type))
            length = C.c_uint32.__ctype_le__.from_buffer_copy(buffer, offset).value
            offset += SIZEOF_UINT32
            size = length * SIZEOF_TAG_TYPES[array_type]
            if end - offset < size:
                return info, _malformed(tag, "array of {} elements overruns the record".format(length))
            # TODO decode array contents once AlignmentRecord.info can hold lists
            offset += size
        else:
            return info, DataLossError("Unknown tag {} type {!r}".format(tag, value_type))
    return info, None
