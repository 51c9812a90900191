"""
This subpackage contains the code needed to read BGZF compressed data.

Classes:
    Block: Represents a BGZF/GZIP block.
    Reader: File like interface over the decompressed data, addressed by virtual offsets.
    TruncatedFileWarning: Warning emitted when the EOF marker block is missing.

Constants:
    EMPTY_BLOCK bytes: This is the byte data representing an empty block. This is used as an EOF marker at the end of BGZF compressed files.
    MAX_BLOCK_SIZE int: This is the maximum BGZF block size imposed by the domain of the two byte block size subfield value.

For more:
    >> help(alignpy.bgzf.block) for more information on the Block object.
    >> help(alignpy.bgzf.reader) for more information on the Reader object.
    >> help(alignpy.bgzf.util) for more information on utility functions including functions to work with virtual offsets.
    >> help(alignpy.bgzf.zlib) for more information on the zlib wrapper.
"""

from .block import Block
from .reader import Reader, TruncatedFileWarning
from .util import EMPTY_BLOCK, MAX_BLOCK_SIZE, SIZEOF_EMPTY_BLOCK, InvalidBGZF, is_bgzf, make_virtual_offset, split_virtual_offset
