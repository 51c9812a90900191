"""
Options controlling how a Reader decodes and filters records.

Classes:
    ReaderOptions: Options passed to Reader.from_source().
    ReadRequirements: Acceptance criteria applied to every decoded record.
    AuxFieldHandling: How optional fields are decoded.
    MinBaseQualityMode: Who is responsible for enforcing ReadRequirements.min_base_quality.
"""

from enum import IntEnum

from .errors import InvalidArgumentError
from .util import Slotted


class AuxFieldHandling(IntEnum):
    UNSPECIFIED = 0
    SKIP_AUX_FIELDS = 1
    PARSE_ALL_AUX_FIELDS = 2


class MinBaseQualityMode(IntEnum):
    UNSPECIFIED = 0
    ENFORCED_BY_CLIENT = 1
    ENFORCED_BY_READER = 2


SUPPORTED_BASE_QUALITY_MODES = (MinBaseQualityMode.UNSPECIFIED, MinBaseQualityMode.ENFORCED_BY_CLIENT)


class ReadRequirements(Slotted):
    """
    Criteria a record must meet to be returned by a Reader.
    The defaults reject duplicates, reads failing vendor QC, secondary and supplementary alignments, unaligned reads
    and improperly placed pairs, and accept any mapping quality.
    min_base_quality is only recorded, it is never applied by the reader (see MinBaseQualityMode).
    """
    __slots__ = ('keep_duplicates', 'keep_failed_vendor_quality_checks', 'keep_secondary_alignments',
                 'keep_supplementary_alignments', 'keep_unaligned', 'keep_improperly_placed', 'min_mapping_quality',
                 'min_base_quality', 'min_base_quality_mode')

    def __init__(self, keep_duplicates=False, keep_failed_vendor_quality_checks=False, keep_secondary_alignments=False,
                 keep_supplementary_alignments=False, keep_unaligned=False, keep_improperly_placed=False,
                 min_mapping_quality=0, min_base_quality=0, min_base_quality_mode=MinBaseQualityMode.UNSPECIFIED):
        self.keep_duplicates = keep_duplicates
        self.keep_failed_vendor_quality_checks = keep_failed_vendor_quality_checks
        self.keep_secondary_alignments = keep_secondary_alignments
        self.keep_supplementary_alignments = keep_supplementary_alignments
        self.keep_unaligned = keep_unaligned
        self.keep_improperly_placed = keep_improperly_placed
        self.min_mapping_quality = min_mapping_quality
        self.min_base_quality = min_base_quality
        self.min_base_quality_mode = MinBaseQualityMode(min_base_quality_mode)


class ReaderOptions(Slotted):
    """
    Options passed to Reader.from_source().
    :ivar aux_field_handling: AuxFieldHandling, only PARSE_ALL_AUX_FIELDS decodes optional fields.
    :ivar read_requirements: ReadRequirements, any callable taking an AlignmentRecord and returning a bool, or None to keep every record.
    :ivar downsample_fraction: Fraction of records passing read_requirements to keep, 0 disables downsampling.
    :ivar random_seed: Seed of the downsampling random stream.
    :ivar hts_block_size: Read buffer size hint in bytes passed to the store, 0 for the store default.
    """
    __slots__ = 'aux_field_handling', 'read_requirements', 'downsample_fraction', 'random_seed', 'hts_block_size'

    def __init__(self, aux_field_handling=AuxFieldHandling.UNSPECIFIED, read_requirements=None, downsample_fraction=0.0,
                 random_seed=0, hts_block_size=0):
        self.aux_field_handling = AuxFieldHandling(aux_field_handling)
        self.read_requirements = read_requirements
        self.downsample_fraction = downsample_fraction
        self.random_seed = random_seed
        self.hts_block_size = hts_block_size

    def validate(self) -> None:
        """
        Reject option combinations the reader can not honour.
        :return: None
        """
        requirements = self.read_requirements
        if isinstance(requirements, ReadRequirements) and requirements.min_base_quality_mode not in SUPPORTED_BASE_QUALITY_MODES:
            raise InvalidArgumentError("Unsupported min_base_quality mode in options {!r}".format(self))
        if not 0.0 <= self.downsample_fraction <= 1.0:
            raise InvalidArgumentError("downsample_fraction must be within [0, 1], got {}".format(self.downsample_fraction))
        if self.hts_block_size < 0:
            raise InvalidArgumentError("hts_block_size can not be negative")
