"""
Conversion of raw BAM records into AlignmentRecord instances.

Malformed core fields (lengths that overrun the data block, unknown CIGAR operations, a mate flagged mapped without a
reference) raise DataLossError. Malformed optional fields only cost the tags after the first bad one: a warning is
emitted and the record is returned with the tags decoded so far.
"""

import warnings

from .alignment import AlignmentRecord, CigarUnit, LinearAlignment, OPERATIONS, Position
from .bam.record import RawRecord
from .bam.tag import parse_aux_fields
from .bam.util import InvalidBAM, MISSING_QUALITY, RecordFlags
from .errors import DataLossError
from .options import AuxFieldHandling, ReaderOptions

MAX_AUX_WARNINGS = 1
"""int: Number of aux field failures reported per process, later failures are silent."""

_aux_warnings = 0


class AuxFieldWarning(UserWarning):
    """
    Warning for a record whose optional fields could not be fully decoded.
    """
    pass


def _report_aux_failure(name, error):
    global _aux_warnings
    if _aux_warnings < MAX_AUX_WARNINGS:
        _aux_warnings += 1
        warnings.warn("Aux field parsing failure in read {}: {}".format(name, error), AuxFieldWarning)


def _reference_name(contigs, reference_id):
    if 0 <= reference_id < len(contigs):
        return contigs[reference_id].name
    raise DataLossError("Reference id {} is not one of the {} contigs in the header".format(reference_id, len(contigs)))


def _cigar(record: RawRecord):
    units = []
    for length, op in record.cigar:
        if op >= len(OPERATIONS):
            raise DataLossError("Unknown CIGAR op code {} in read {}".format(op, record.name))
        units.append(CigarUnit(OPERATIONS[op], length))
    return units


def convert(record: RawRecord, contigs, options: ReaderOptions = None) -> AlignmentRecord:
    """
    Decode a raw record.
    :param record: RawRecord instance as returned by the store.
    :param contigs: Sequence of ContigInfo used to resolve reference ids, usually HeaderMetadata.contigs.
    :param options: ReaderOptions instance, controls aux field decoding. None skips aux fields.
    :return: A new AlignmentRecord instance.
    """
    core = record.header
    try:
        record.validate()
    except InvalidBAM as e:
        raise DataLossError("Malformed record: {}".format(e)) from e
    flags = RecordFlags(core.flag)

    read = AlignmentRecord()
    read.fragment_name = record.name.decode('ASCII', errors='replace')
    read.fragment_length = core.template_length
    read.proper_placement = bool(flags & RecordFlags.ALIGNED)
    read.duplicate_fragment = bool(flags & RecordFlags.DUPLICATE)
    read.failed_vendor_quality_checks = bool(flags & RecordFlags.QCFAIL)
    read.secondary_alignment = bool(flags & RecordFlags.SECONDARY)
    read.supplementary_alignment = bool(flags & RecordFlags.SUPPLEMENTARY)

    paired = bool(flags & RecordFlags.MULTISEG)
    read.read_number = 0 if flags & RecordFlags.READ1 or not paired else 1
    read.number_reads = 2 if paired else 1

    if core.sequence_length:
        read.aligned_sequence = record.sequence.decode()
        quality = record.quality_scores
        if quality[0] != MISSING_QUALITY:
            read.aligned_quality = list(quality)

    if not flags & RecordFlags.UNMAPPED:
        alignment = LinearAlignment(core.mapping_quality)
        if core.cigar_length:
            alignment.cigar = _cigar(record)
        if core.reference_id >= 0:
            alignment.position = Position(_reference_name(contigs, core.reference_id), core.position,
                                          bool(flags & RecordFlags.REVERSE_COMPLIMENTED))
        read.alignment = alignment

    if paired and not flags & RecordFlags.MATE_UNMAPPED:
        if core.next_reference_id < 0:
            raise DataLossError("Expected next_reference_id >= 0 as mate is supposedly mapped: {!r}".format(read))
        read.next_mate_position = Position(_reference_name(contigs, core.next_reference_id), core.next_position,
                                           bool(flags & RecordFlags.MATE_REVERSED))

    if options is not None and options.aux_field_handling == AuxFieldHandling.PARSE_ALL_AUX_FIELDS:
        read.info, error = parse_aux_fields(record.data, record.tags_offset)
        if error is not None:
            _report_aux_failure(read.fragment_name, error)

    return read
