"""
view [-c] [-v] [-x] [-q MAPQ] [-s FRACTION] [-S SEED] in.bam [region...]

With no options or regions specified, prints every decoded alignment in the input file to standard output, one per line.
You may specify one or more space-separated regions after the input filename to restrict output to the alignments
overlapping them. Regions require a coordinate-sorted and indexed (BAI) input file.

REGIONS:
Regions can be specified as: RNAME[:STARTPOS[-ENDPOS]] and all position coordinates are 1-based.
When multiple regions are given, alignments overlapping more than one of them are output multiple times.

OPTIONS:

-c Instead of printing the alignments, only count them and print the total number.
-q INT Skip alignments with MAPQ smaller than INT [0].
-s FLOAT Output only a proportion of the input alignments, drawn independently per alignment.
-S INT Seed of the random stream used by -s [0].
-x Do not decode optional fields.
-v Log informational messages to standard error.
-h Output this help and exit.
"""

import getopt
import logging
import sys

from .alignment import Range
from .errors import AlignmentError
from .options import AuxFieldHandling, ReaderOptions, ReadRequirements
from .reader import Reader

logger = logging.getLogger(__name__)


def _requirements(min_mapping_quality):
    if not min_mapping_quality:
        return None
    return ReadRequirements(keep_duplicates=True, keep_failed_vendor_quality_checks=True, keep_secondary_alignments=True,
                            keep_supplementary_alignments=True, keep_unaligned=True, keep_improperly_placed=True,
                            min_mapping_quality=min_mapping_quality)


def main(argv=None, out=None) -> int:
    """
    Command line entry point.
    :param argv: Arguments excluding the program name, defaults to sys.argv[1:].
    :param out: Text stream to write to, defaults to sys.stdout.
    :return: Process exit status.
    """
    argv = sys.argv[1:] if argv is None else argv
    out = out or sys.stdout
    try:
        opts, args = getopt.gnu_getopt(argv, 'cvxhq:s:S:')
        opts = dict(opts)
        if '-h' in opts:
            print(__doc__, file=out)
            return 0
        if not args:
            raise getopt.GetoptError("No input file specified")
        options = ReaderOptions(
            aux_field_handling=AuxFieldHandling.SKIP_AUX_FIELDS if '-x' in opts else AuxFieldHandling.PARSE_ALL_AUX_FIELDS,
            read_requirements=_requirements(int(opts.get('-q', 0))),
            downsample_fraction=float(opts.get('-s', 0.0)),
            random_seed=int(opts.get('-S', 0)),
        )
    except (getopt.GetoptError, ValueError) as e:
        print("view: {}".format(e), file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.INFO if '-v' in opts else logging.WARNING)

    count = 0
    try:
        with Reader.from_source(args[0], options=options) as reader:
            regions = [Range.parse(region) for region in args[1:]]
            if not regions:
                with reader.iterate() as records:
                    count += _emit(records, out, '-c' in opts)
            for region in regions:
                logger.info("Querying %r", region)
                with reader.query(region) as records:
                    count += _emit(records, out, '-c' in opts)
    except AlignmentError as e:
        print("view: {}".format(e), file=sys.stderr)
        return 1

    if '-c' in opts:
        print(count, file=out)
    return 0


def _emit(records, out, count_only) -> int:
    count = 0
    for record in records:
        count += 1
        if not count_only:
            print(record, file=out)
    return count
