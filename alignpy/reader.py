"""
Provides the interface for reading decoded alignment records.

Example:
    from alignpy import Reader, ReaderOptions, Range

    with Reader.from_source("data.bam", options=ReaderOptions(downsample_fraction=0.1, random_seed=7)) as reader:
        print(reader.header.sorting_order)
        with reader.query(Range.parse("chr1:1000-2000")) as records:
            for record in records:
                ***Your logic here***

A Reader owns a single cursor into its file, so only one of its iterators may be open at a time.
Close an iterator (leave its with block, or drop every reference to it) before asking the Reader for another one.
"""

import logging
import warnings
import weakref

from .convert import convert
from .errors import DataLossError, FailedPreconditionError, InternalError, NotFoundError
from .header import HeaderMetadata, decode_header
from .options import ReaderOptions
from .requirements import requirement_filter
from .sampler import FractionalSampler
from .store import AlignmentStore, open_store

logger = logging.getLogger(__name__)


class Reader:
    """
    Reads AlignmentRecord instances from an alignment store, either the whole file or the records overlapping a region.
    Records failing the configured read requirements are skipped and the rest are downsampled if requested.
    """

    def __init__(self, store: AlignmentStore, header: HeaderMetadata, index=None, options: ReaderOptions = None):
        """
        Constructor. Use Reader.from_source() to open a file.
        :param store: Open AlignmentStore, the Reader takes ownership and closes it.
        :param header: HeaderMetadata decoded from the store.
        :param index: Index handle returned by store.load_index() or None.
        :param options: ReaderOptions instance.
        """
        self.options = options or ReaderOptions()
        self.header = header
        self._store = store
        self._index = index
        self._keep = requirement_filter(self.options.read_requirements)
        self._sampler = FractionalSampler(self.options.downsample_fraction, self.options.random_seed)
        self._live_iterator = None  # weakref.ref to the open iterator
        self._closed = False

    @staticmethod
    def from_source(reads_path, ref_path: str = '', options: ReaderOptions = None, opener=open_store) -> 'Reader':
        """
        Open an alignment file.
        :param reads_path: Path to the SAM/BAM/CRAM file.
        :param ref_path: Reference FASTA used to decode CRAM files. When empty the reference is expected to be embedded.
        :param options: ReaderOptions instance or None for the defaults.
        :param opener: Callable (locator, mode) returning an AlignmentStore.
        :return: Reader instance.
        """
        options = options or ReaderOptions()
        options.validate()

        store = opener(reads_path, 'r')
        try:
            if options.hts_block_size > 0:
                logger.info("Setting block size to %d", options.hts_block_size)
                store.set_block_size(options.hts_block_size)

            try:
                text, names, lengths = store.read_header()
            except ValueError as e:
                raise DataLossError("Couldn't parse header for {}".format(reads_path)) from e
            header = decode_header(text, names, lengths)

            index = store.load_index() if store.indexable else None

            if store.requires_reference:
                if ref_path:
                    logger.info("Setting CRAM reference path to '%s'", ref_path)
                    store.set_reference(ref_path)
                else:
                    store.use_embedded_reference()
        except BaseException:
            store.close()
            raise

        return Reader(store, header, index, options)

    def has_index(self) -> bool:
        return self._index is not None

    def keep_read(self, read) -> bool:
        """
        Decide if a decoded record is returned to the caller.
        The sampler is only consulted for records that pass the read requirements.
        :param read: AlignmentRecord instance.
        :return: True to return the record.
        """
        if self._keep is not None and not self._keep(read):
            return False
        if self.options.downsample_fraction != 0.0 and not self._sampler.keep():
            return False
        return True

    def _check_open(self, operation):
        if self._closed:
            raise FailedPreconditionError("Cannot {} a closed Reader.".format(operation))
        if self._live() is not None:
            raise FailedPreconditionError("Cannot {} while another iterator of this Reader is open.".format(operation))

    def iterate(self) -> 'FullFileIterator':
        """
        Iterate over every record from the current position of the file.
        :return: FullFileIterator instance.
        """
        self._check_open('iterate')
        return self._track(FullFileIterator(self, self._store))

    def query(self, region) -> 'QueryIterator':
        """
        Iterate over the records overlapping a region.
        :param region: alignpy.Range with a 0-based half-open interval.
        :return: QueryIterator instance.
        """
        self._check_open('query')
        if not self.has_index():
            raise FailedPreconditionError("Cannot query without an index")

        tid = next((contig.pos_in_fasta for contig in self.header.contigs if contig.name == region.reference_name), -1)
        if tid < 0:
            raise NotFoundError("Unknown reference_name {!r}".format(region))

        try:
            handle = self._store.bounded_iterator(self._index, tid, region.start, region.end)
        except ValueError:
            raise NotFoundError("region {!r} specifies an unknown reference interval".format(region)) from None
        return self._track(QueryIterator(self, self._store, handle))

    def _track(self, iterator):
        self._live_iterator = weakref.ref(iterator)
        return iterator

    def _live(self):
        """
        :return: The open iterator of this Reader or None. An iterator discarded without being closed no longer counts.
        """
        iterator = self._live_iterator() if self._live_iterator is not None else None
        if iterator is None or iterator.closed:
            self._live_iterator = None
            return None
        return iterator

    def _release_iterator(self, iterator):
        if self._live() is iterator:
            self._live_iterator = None

    def close(self) -> None:
        """
        Release the index, the header and the store, in that order.
        A Reader must be closed exactly once.
        :return: None
        """
        if self._closed:
            raise FailedPreconditionError("Reader is already closed.")
        self._closed = True
        iterator = self._live()
        if iterator is not None:
            iterator.close()
        self._index = None
        self.header = None
        store, self._store = self._store, None
        try:
            store.close()
        except OSError as e:
            raise InternalError("Closing the alignment store failed") from e

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        if not getattr(self, '_closed', True):
            warnings.warn("Reader was not closed before being discarded.", ResourceWarning)


class _RecordIterator:
    """
    Base class for FullFileIterator and QueryIterator.
    Pulls raw records from the store, decodes them and returns the first one the Reader keeps.
    """

    def __init__(self, reader: Reader, store: AlignmentStore):
        self._reader = reader
        self._store = store
        self._closed = False

    def _next_raw(self):
        raise NotImplementedError()

    def _release(self):
        pass

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self):
        return self

    def __next__(self):
        if self._closed:
            raise FailedPreconditionError("Cannot iterate a closed iterator.")
        reader = self._reader
        while True:
            try:
                raw = self._next_raw()
            except EOFError:
                raise StopIteration()
            except ValueError as e:
                raise DataLossError("Failed to parse SAM record") from e
            read = convert(raw, reader.header.contigs, reader.options)
            if reader.keep_read(read):
                return read

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()
        self._reader._release_iterator(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        # The Reader only holds a weak reference, so a dropped iterator frees its slot on its own.
        if not getattr(self, '_closed', True):
            self._closed = True
            self._release()


class FullFileIterator(_RecordIterator):
    """
    Iterates over every record of the store in file order.
    """

    def _next_raw(self):
        return self._store.read_next()


class QueryIterator(_RecordIterator):
    """
    Iterates over the records returned by a bounded store iterator.
    Closing or discarding it releases the bounded iterator.
    """

    def __init__(self, reader: Reader, store: AlignmentStore, handle):
        super().__init__(reader, store)
        self._handle = handle

    def _next_raw(self):
        return self._store.bounded_read_next(self._handle)

    def _release(self):
        handle, self._handle = self._handle, None
        self._store.close_bounded_iterator(handle)
