"""
Python library decoding BAM alignment records into structured, typed records.

Classes:
    Reader: Opens an alignment file and iterates over decoded records, optionally filtered and downsampled.
    ReaderOptions: Options controlling decoding, filtering and downsampling.
    ReadRequirements: Acceptance criteria applied to every decoded record.
    AlignmentRecord: One decoded read.
    HeaderMetadata: Decoded SAM header.
    Range: A 0-based half-open interval used for region queries.
    ContigInfo: A reference sequence that the records were aligned to.

Functions:
    convert.convert: Decode a single raw record.
    decode_header: Decode SAM header text.
    open_store: Open an alignment file at the raw record level.

Example 1:
    from alignpy import Reader
    with Reader.from_source("data.bam") as reader:
        contigs = reader.header.contigs
        with reader.iterate() as records:
            for record in records:
                ***Your logic here***

Example 2:
    from alignpy import Reader, ReaderOptions, ReadRequirements, Range, AuxFieldHandling

    options = ReaderOptions(
        aux_field_handling=AuxFieldHandling.PARSE_ALL_AUX_FIELDS,
        read_requirements=ReadRequirements(min_mapping_quality=20),
        downsample_fraction=0.25,
        random_seed=42,
    )
    with Reader.from_source("data.bam", options=options) as reader:
        with reader.query(Range.parse("chr1:1,000,000-2,000,000")) as records:
            for record in records:
                print(record.fragment_name, record.info.get('NM'))

For more:
    >> help(alignpy.bam) for more information on working with BAM formatted data.
    >> help(alignpy.bgzf) for more information on working with BGZF compressed data.
    >> help(alignpy.reader) for more information on reading alignment records.
    >> help(alignpy.header) for more information on decoded header data.
    >> help(alignpy.store) for more information on the alignment store interface.
    >> help(alignpy.errors) for more information on the exceptions raised.
"""

from .__version import __version__
from .alignment import AlignmentRecord, CigarOperation, CigarUnit, LinearAlignment, Position, Range
from .convert import AuxFieldWarning
from .errors import AlignmentError, DataLossError, FailedPreconditionError, InternalError, InvalidArgumentError, NotFoundError
from .header import AlignmentGrouping, HeaderMetadata, HeaderWarning, Program, ReadGroup, SortingOrder, decode_header
from .options import AuxFieldHandling, MinBaseQualityMode, ReaderOptions, ReadRequirements
from .reader import FullFileIterator, QueryIterator, Reader
from .reference import ContigInfo
from .sampler import FractionalSampler
from .store import AlignmentStore, open_store
