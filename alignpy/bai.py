"""
Reading of BAI indexes and region queries over BGZF compressed BAM data.
"""

import ctypes as C

from .bam.record import RawRecord
from .bam.util import reg2bins

MAGIC = b'BAI\1'

PSEUDO_BIN = 37450
"""int: Bin number holding per reference mapped/unmapped counts instead of chunks."""

LINEAR_SHIFT = 14
"""int: log2 of the 16kbp interval size of the linear index."""

MAX_COORDINATE = 1 << 29
"""int: Exclusive upper bound of the positions the binning scheme covers."""


class Chunk(C.LittleEndianStructure):
    _pack_ = 1
    _fields_ = [
        ("begin", C.c_uint64),  # (Virtual) file offset of the start of the chunk
        ("end", C.c_uint64),  # (Virtual) file offset of the end of the chunk
    ]


SIZEOF_CHUNK = C.sizeof(Chunk)
SIZEOF_UINT64 = C.sizeof(C.c_uint64)


class InvalidBAI(ValueError):
    pass


def _read_int(stream, size=4, signed=True):
    data = stream.read(size)
    if len(data) != size:
        raise EOFError()
    return int.from_bytes(data, byteorder='little', signed=signed)


class Index:
    """
    An in memory BAI index.
    :ivar bins: List of dicts indexed by reference id. Dict elements are keyed on bin number and values are arrays of Chunks.
    :ivar intervals: List of arrays of virtual file offsets for each 16kbp reference interval. Indexed by reference id.
    :ivar n_no_coor: Number of unplaced unmapped reads (RNAME *), None if not present in BAI.
    """
    __slots__ = 'bins', 'intervals', 'n_no_coor'

    def __init__(self, bins: list, intervals: list, n_no_coor: int = None):
        self.bins = bins
        self.intervals = intervals
        self.n_no_coor = n_no_coor

    def __len__(self):
        return len(self.bins)

    def chunks(self, tid: int, beg: int, end: int) -> list:
        """
        Find the file regions that can hold records overlapping [beg, end) on reference tid.
        :param tid: Reference id.
        :param beg: 0-based start.
        :param end: 0-based exclusive end.
        :return: Sorted list of non overlapping (begin, end) virtual offset tuples.
        """
        end = min(end, MAX_COORDINATE)
        bins = self.bins[tid]
        intervals = self.intervals[tid]
        min_offset = 0
        if len(intervals):
            min_offset = intervals[min(beg >> LINEAR_SHIFT, len(intervals) - 1)]
        found = sorted((chunk.begin, chunk.end) for bin in reg2bins(beg, end) for chunk in bins.get(bin, ()) if chunk.end > min_offset)
        merged = []
        for begin, chunk_end in found:
            if merged and begin <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], chunk_end))
            else:
                merged.append((begin, chunk_end))
        return merged


def read(stream) -> Index:
    """
    Read in BAI index data.
    :param stream: Readable stream containing BAI formatted data.
    :return: Index instance.
    """
    if stream.read(4) != MAGIC:
        raise InvalidBAI("Unknown or corrupt input data.")
    try:
        n_ref = _read_int(stream)
        bins = [None] * n_ref
        intervals = [None] * n_ref
        for ref in range(n_ref):
            # Read in bins
            bins[ref] = {}
            n_bin = _read_int(stream)
            for _ in range(n_bin):
                bin = _read_int(stream, signed=False)
                n_chunk = _read_int(stream)
                data = stream.read(SIZEOF_CHUNK * n_chunk)
                if len(data) != SIZEOF_CHUNK * n_chunk:
                    raise EOFError()
                if bin != PSEUDO_BIN:
                    bins[ref][bin] = (Chunk * n_chunk).from_buffer_copy(data)

            # Read in intervals
            n_intv = _read_int(stream)
            data = stream.read(SIZEOF_UINT64 * n_intv)
            if len(data) != SIZEOF_UINT64 * n_intv:
                raise EOFError()
            intervals[ref] = (C.c_uint64.__ctype_le__ * n_intv).from_buffer_copy(data)
    except EOFError:
        raise InvalidBAI("Truncated index.") from None

    try:
        n_no_coor = _read_int(stream, 8, signed=False)
    except EOFError:
        n_no_coor = None
    return Index(bins, intervals, n_no_coor)


class RegionIterator:
    """
    Yields the records of a coordinate sorted BAM file that overlap [beg, end) on one reference.
    The BGZF reader is shared with the owning store, only one iterator may use it at a time.
    """

    def __init__(self, reader, chunks, tid, beg, end):
        """
        Constructor.
        :param reader: alignpy.bgzf.Reader over the BAM data.
        :param chunks: Sorted (begin, end) virtual offsets from Index.chunks().
        :param tid: Reference id.
        :param beg: 0-based start.
        :param end: 0-based exclusive end.
        """
        self._reader = reader
        self._chunks = list(chunks)
        self._chunk_end = None
        self.tid = tid
        self.beg = beg
        self.end = end
        self.finished = not self._chunks

    def read_next(self) -> RawRecord:
        """
        Read the next overlapping record.
        :return: RawRecord instance, raises EOFError once the region is exhausted.
        """
        while not self.finished:
            if self._chunk_end is None or self._reader.tell() >= self._chunk_end:
                if not self._chunks:
                    break
                begin, self._chunk_end = self._chunks.pop(0)
                if self._reader.tell() != begin:
                    self._reader.seek(begin)
            try:
                record = RawRecord.from_stream(self._reader)
            except EOFError:
                break
            header = record.header
            if header.reference_id != self.tid or header.position >= self.end:
                # Sorted input, nothing later can overlap.
                break
            if record.end() > self.beg:
                return record
        self.finished = True
        raise EOFError()

    def close(self):
        self._chunks = []
        self.finished = True
