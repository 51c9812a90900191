"""
The alignment store: the layer that owns the file handle and hands raw records to the Reader.

AlignmentStore documents the interface the Reader relies on. BAMStore implements it for BGZF compressed and raw BAM
files, with region queries served from a BAI index when one is found next to the file.

Functions:
    open_store: Open a file and return the store able to read it.
"""

import io
import logging
import os

from . import bai, bam, bgzf
from .errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


class AlignmentStore:
    """
    Interface of a source of raw alignment records.
    Methods reading records raise EOFError at the end of the stream and alignpy.bam.InvalidBAM (or another ValueError)
    for data that can not be framed into a record.
    """
    format = None
    indexable = False
    requires_reference = False

    def read_header(self):
        """
        :return: Tuple containing (SAM header text bytes, list of reference names, list of reference lengths).
        """
        raise NotImplementedError()

    def read_next(self) -> bam.RawRecord:
        raise NotImplementedError()

    def load_index(self):
        """
        :return: Index handle or None when the source has no index.
        """
        return None

    def bounded_iterator(self, index, tid: int, start: int, end: int):
        """
        :return: Handle passed to bounded_read_next(), raises ValueError if the interval is invalid for tid.
        """
        raise NotImplementedError()

    def bounded_read_next(self, handle) -> bam.RawRecord:
        raise NotImplementedError()

    def close_bounded_iterator(self, handle) -> None:
        handle.close()

    def set_block_size(self, size: int) -> None:
        pass

    def set_reference(self, path: str) -> None:
        raise NotImplementedError()

    def use_embedded_reference(self) -> None:
        raise NotImplementedError()

    def close(self) -> None:
        raise NotImplementedError()


def index_paths(path):
    """
    Candidate locations of the BAI index of a BAM file, in the order they are tried.
    :param path: Path to the BAM file.
    :return: List of paths.
    """
    paths = [path + '.bai']
    stem, ext = os.path.splitext(path)
    if ext == '.bam':
        paths.append(stem + '.bai')
    return paths


class BAMStore(AlignmentStore):
    """
    Reads BAM data from a file, BGZF compressed or not.
    Only compressed files can be indexed since BAI indexes address records by BGZF virtual offsets.
    """
    format = 'bam'

    def __init__(self, path, handle, compressed=True):
        """
        Constructor.
        :param path: Path the file was opened from, used to find the index.
        :param handle: Binary file object positioned at the start of the file.
        :param compressed: True if the data is BGZF compressed.
        """
        self.path = path
        self._handle = handle
        self.compressed = compressed
        self.indexable = compressed
        self._stream = bgzf.Reader(handle) if compressed else handle

    def set_block_size(self, size: int) -> None:
        """
        Replace the file buffer with one of the given size.
        :param size: Buffer size in bytes.
        :return: None
        """
        position = self._handle.tell()
        raw = self._handle.detach() if isinstance(self._handle, io.BufferedReader) else self._handle
        raw.seek(position)
        self._handle = io.BufferedReader(raw, buffer_size=size)
        if self.compressed:
            self._stream = bgzf.Reader(self._handle)
        else:
            self._stream = self._handle

    def read_header(self):
        return bam.header_from_stream(self._stream)

    def read_next(self) -> bam.RawRecord:
        return bam.RawRecord.from_stream(self._stream)

    def load_index(self):
        if not self.indexable:
            return None
        for path in index_paths(self.path):
            if os.path.exists(path):
                with open(path, 'rb') as stream:
                    try:
                        return bai.read(stream)
                    except bai.InvalidBAI as e:
                        logger.warning("Ignoring unreadable index %s: %s", path, e)
                        return None
        logger.info("No index found for %s", self.path)
        return None

    def bounded_iterator(self, index, tid: int, start: int, end: int) -> bai.RegionIterator:
        if not 0 <= tid < len(index):
            raise ValueError("Reference id {} is not in the index.".format(tid))
        if start < 0 or end < start:
            raise ValueError("Invalid interval [{}, {}).".format(start, end))
        return bai.RegionIterator(self._stream, index.chunks(tid, start, end), tid, start, end)

    def bounded_read_next(self, handle: bai.RegionIterator) -> bam.RawRecord:
        return handle.read_next()

    def set_reference(self, path: str) -> None:
        raise InvalidArgumentError("BAM files do not use a reference for decoding.")

    def use_embedded_reference(self) -> None:
        pass

    def close(self) -> None:
        self._stream = None
        self._handle.close()


def open_store(locator, mode='r') -> AlignmentStore:
    """
    Open an alignment file.
    :param locator: Path to the file.
    :param mode: Only 'r' is supported.
    :return: AlignmentStore able to read the file.
    """
    if mode != 'r':
        raise InvalidArgumentError("Unsupported mode {!r}, stores are read only.".format(mode))
    try:
        handle = open(locator, 'rb')
    except FileNotFoundError:
        raise NotFoundError("Could not open {}".format(locator)) from None
    peek = handle.read(4)
    handle.seek(0)
    if bgzf.is_bgzf(peek):
        return BAMStore(locator, handle, compressed=True)
    if bam.is_bam(peek):
        return BAMStore(locator, handle, compressed=False)
    handle.close()
    raise InvalidArgumentError("{} is not a BAM file.".format(locator))
