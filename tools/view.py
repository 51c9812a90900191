"""
view
Print or count the decoded alignments of a BAM file.

Usage: python tools/view.py [-c] [-v] [-x] [-q MAPQ] [-s FRACTION] [-S SEED] in.bam [region...]

See help(alignpy.view) for the description of every option.
"""

import sys

from alignpy.view import main

if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
