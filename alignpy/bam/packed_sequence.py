import numba
import numpy as np

from ..jit import CACHE_JIT
from .util import SEQUENCE_VALUES

_SEQUENCE_TABLE = np.frombuffer(b"".join(SEQUENCE_VALUES), dtype=np.uint8)


@numba.njit(cache=CACHE_JIT)
def _unpack_codes(packed, out):
    for i in range(out.shape[0]):
        b = packed[i >> 1]
        if i & 1:
            out[i] = b & 0x0F
        else:
            out[i] = b >> 4
    return out


class PackedSequence:
    """
    Represents a record sequence string stored in BAM format in memory, two 4 bit codes per byte.
    """
    __slots__ = "buffer", "_length"

    def __init__(self, buffer, length):
        self.buffer = buffer
        self._length = length

    def __repr__(self):
        """
        Convert the BAM formatted sequence into a ASCII string representation.
        :return: str instance containing the sequence.
        """
        return self.decode()

    def __getitem__(self, i) -> int:
        if i < 0:
            i += self._length
        if not 0 <= i < self._length:
            raise IndexError("Sequence index out of range.")
        if i % 2:
            return self.buffer[i // 2] & 0b00001111
        else:
            return self.buffer[i // 2] >> 4

    def __len__(self):
        return self._length

    def codes(self) -> np.ndarray:
        """
        Unpack to one numeric code per base.
        :return: uint8 numpy array of length len(self).
        """
        out = np.empty(self._length, dtype=np.uint8)
        if self._length:
            _unpack_codes(np.frombuffer(self.buffer, dtype=np.uint8), out)
        return out

    def decode(self) -> str:
        """
        Converts the codes to their nucleotide symbols.
        :return: str over the 16 symbol alphabet =ACMGRSVTWYHKDBN.
        """
        return _SEQUENCE_TABLE[self.codes()].tobytes().decode('ASCII')
