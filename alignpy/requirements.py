from .options import ReadRequirements


def read_satisfies_requirements(read, requirements: ReadRequirements) -> bool:
    """
    Check a decoded record against ReadRequirements.
    Base qualities are never inspected here, min_base_quality is the caller's to enforce.
    :param read: AlignmentRecord instance.
    :param requirements: ReadRequirements instance.
    :return: True if the record should be kept.
    """
    if read.duplicate_fragment and not requirements.keep_duplicates:
        return False
    if read.failed_vendor_quality_checks and not requirements.keep_failed_vendor_quality_checks:
        return False
    if read.secondary_alignment and not requirements.keep_secondary_alignments:
        return False
    if read.supplementary_alignment and not requirements.keep_supplementary_alignments:
        return False
    aligned = read.alignment is not None and read.alignment.position is not None
    if not aligned and not requirements.keep_unaligned:
        return False
    if read.number_reads == 2 and not read.proper_placement and not requirements.keep_improperly_placed:
        return False
    mapping_quality = read.alignment.mapping_quality if read.alignment is not None else 0
    return mapping_quality >= requirements.min_mapping_quality


def requirement_filter(requirements):
    """
    Turn the read_requirements option into a predicate.
    :param requirements: ReadRequirements instance, callable taking an AlignmentRecord, or None.
    :return: Callable returning True for records to keep, or None if every record is kept.
    """
    if requirements is None:
        return None
    if isinstance(requirements, ReadRequirements):
        return lambda read: read_satisfies_requirements(read, requirements)
    if callable(requirements):
        return requirements
    raise TypeError("read_requirements must be ReadRequirements or callable, got {}".format(type(requirements).__name__))
