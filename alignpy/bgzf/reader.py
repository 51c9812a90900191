"""
Provides a file like reader over the decompressed contents of a BGZF stream.
"""

import ctypes as C
import warnings

from . import zlib
from .block import Block
from .util import InvalidBGZF, make_virtual_offset, split_virtual_offset


class TruncatedFileWarning(UserWarning):
    """
    Warning to indicate the empty BGZF block marking EOF is missing, the data is possibly truncated.
    """
    pass


def inflate(block: Block, cdata) -> bytes:
    """
    Decompress the data of one block and check it against the block trailer.
    :param block: Block instance describing the data.
    :param cdata: Writable buffer holding the compressed data.
    :return: bytes containing the uncompressed data.
    """
    size = block.uncompressed_size
    data = (C.c_ubyte * size)()
    src = (C.c_ubyte * len(cdata)).from_buffer(cdata)
    res, state = zlib.raw_decompress(src, data)
    if res != zlib.Z_STREAM_END or state.total_out != size:
        raise InvalidBGZF("Invalid zlib data, inflate returned {}.".format(res))
    if zlib.crc32(data) != block.CRC32:
        raise InvalidBGZF("Block CRC32 does not match its data.")
    return bytes(data)


class Reader:
    """
    Reads decompressed data from a stream of BGZF blocks.
    Positions are BGZF virtual offsets: the file offset of the block shifted left 16 bits, OR'd with the offset into
    the uncompressed block data.
    """

    def __init__(self, stream):
        """
        Constructor.
        :param stream: Binary stream positioned on the first byte of a block. Must be seekable to use seek().
        """
        self._stream = stream
        self._next_block_offset = stream.tell() if stream.seekable() else 0
        self.block_offset = self._next_block_offset
        self.buffer = b''
        self.offset = 0
        self._last_block_empty = False
        self._warned = False

    def _load_block(self) -> bool:
        """
        Decompress the next block holding data, skipping empty blocks.
        :return: False at the end of the stream.
        """
        while True:
            block_offset = self._next_block_offset
            try:
                block, cdata = Block.from_stream(self._stream)
            except EOFError:
                if not self._last_block_empty and not self._warned:
                    self._warned = True
                    warnings.warn("Missing EOF marker, data is possibly truncated.", TruncatedFileWarning)
                return False
            self._next_block_offset = block_offset + len(block)
            if not block.uncompressed_size:
                self._last_block_empty = True
                continue
            self._last_block_empty = False
            self.buffer = inflate(block, cdata)
            self.block_offset = block_offset
            self.offset = 0
            return True

    def readinto(self, b) -> int:
        """
        Fill b with decompressed data, crossing block boundaries as needed.
        :param b: Writable buffer.
        :return: Number of bytes written, less than len(b) only at the end of the stream.
        """
        view = memoryview(b).cast('B')
        count = 0
        while count < len(view):
            if self.offset >= len(self.buffer) and not self._load_block():
                break
            chunk = min(len(view) - count, len(self.buffer) - self.offset)
            view[count:count + chunk] = self.buffer[self.offset:self.offset + chunk]
            self.offset += chunk
            count += chunk
        return count

    def read(self, size: int) -> bytes:
        data = bytearray(size)
        return bytes(data[:self.readinto(data)])

    def tell(self) -> int:
        """
        Virtual offset of the next byte to be read.
        A position at the end of a block is reported as the start of the following block.
        :return: Virtual file offset.
        """
        if self.offset >= len(self.buffer):
            return make_virtual_offset(self._next_block_offset, 0)
        return make_virtual_offset(self.block_offset, self.offset)

    def seek(self, virtual_offset: int) -> None:
        """
        Move to a virtual offset, typically one taken from a BAI index or from tell().
        :param virtual_offset: Virtual file offset.
        :return: None
        """
        block_offset, within_block = split_virtual_offset(virtual_offset)
        self._stream.seek(block_offset)
        self._next_block_offset = block_offset
        self.block_offset = block_offset
        self.buffer = b''
        self.offset = 0
        if within_block:
            if not self._load_block() or within_block > len(self.buffer):
                raise InvalidBGZF("Virtual offset {} is outside of the block data.".format(virtual_offset))
            self.offset = within_block
