MAGIC = b'\x1F\x8B'
"""bytes: Magic bytes identifying BGZF block"""

MAX_BLOCK_SIZE = 2 ** 16 - 1
"""int: This is the maximum BGZF block size imposed by the domain of the two byte block size subfield value."""

EMPTY_BLOCK = b'\x1f\x8b\x08\x04\x00\x00\x00\x00\x00\xff\x06\x00\x42\x43\x02\x00\x1b\x00\x03\x00\x00\x00\x00\x00\x00\x00\x00\x00'
"""bytes: This is the byte data representing an empty block. This is used as an EOF marker at the end of BGZF compressed files."""

SIZEOF_EMPTY_BLOCK = len(EMPTY_BLOCK)
"""int: Number of bytes that the empty block occupies."""


def is_bgzf(buffer, offset=0):
    """
    Helper to determine if passed buffer contains a BGZF block.
    :param buffer: Buffer containing unknown data.
    :param offset: Offset into buffer to being reading.
    :return: True if offset points to beginning of a BGZF block, False otherwise.
    """
    return bytes(buffer[offset:offset + 2]) == MAGIC


def make_virtual_offset(block_offset: int, within_block: int) -> int:
    """
    Combine a compressed file offset and an offset into the uncompressed block data.
    :param block_offset: File offset of the first byte of the block.
    :param within_block: Offset into the uncompressed block data.
    :return: 64 bit virtual file offset as used by BAI indexes.
    """
    return block_offset << 16 | within_block


def split_virtual_offset(virtual_offset: int):
    """
    Inverse of make_virtual_offset().
    :param virtual_offset: 64 bit virtual file offset.
    :return: Tuple containing (file offset of the block, offset into the uncompressed block data).
    """
    return virtual_offset >> 16, virtual_offset & 0xFFFF


class InvalidBGZF(ValueError):
    """
    Exception to indicate invalid or unexpected data was read while trying to parse BGZF data.
    """
    pass
