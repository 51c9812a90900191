import numpy as np

from .util import OP_CODES

CIGAR_DTYPE = np.dtype('<u4')


class PackedCIGAR:
    """
    Represents the CIGAR of a record as the BAM packed 32 bit operations stored in memory.
    Each word holds the operation length in its upper 28 bits and the op code in its lower 4 bits.
    """
    __slots__ = "buffer"

    def __init__(self, buffer, offset: int = 0, count: int = 0):
        """
        Constructor.
        :param buffer: Buffer containing the packed operations.
        :param offset: Offset into buffer of the first operation.
        :param count: Number of operations.
        """
        if count:
            self.buffer = np.frombuffer(buffer, dtype=CIGAR_DTYPE, count=count, offset=offset)
        else:
            self.buffer = np.empty(0, dtype=CIGAR_DTYPE)

    def __repr__(self) -> str:
        """
        Returns a string representation of the cigar.
        :return: String representing cigar, ie. 10M2I5M.
        """
        return "".join("{}{}".format(length, OP_CODES[op].decode('ASCII') if op < len(OP_CODES) else '?') for length, op in self)

    def __getitem__(self, i):
        op = int(self.buffer[i])
        return op >> 4, op & 0b1111

    def __iter__(self):
        for op in self.buffer.tolist():
            yield op >> 4, op & 0b1111

    def __len__(self) -> int:
        return len(self.buffer)

    def unpack(self):
        """
        Split the packed words into their two parts.
        :return: Tuple of numpy arrays (operation lengths, operation codes).
        """
        return self.buffer >> 4, self.buffer & 0b1111
