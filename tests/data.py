"""
Builders for the binary fixtures used by the tests: BAM records, BAM headers, BGZF blocks, BAI indexes and a scripted store.
"""

import struct
import zlib

from alignpy.bam import RawRecord
from alignpy.bgzf import EMPTY_BLOCK
from alignpy.store import AlignmentStore

SEQUENCE_SYMBOLS = b"=ACMGRSVTWYHKDBN"


def tag(name: bytes, value_type: bytes, value: bytes) -> bytes:
    return name + value_type + value


def pack_record(name=b'read1', flag=0, reference_id=-1, position=-1, mapping_quality=0, cigar=(), sequence='',
                quality=None, next_reference_id=-1, next_position=-1, template_length=0, tags=b'') -> bytes:
    """
    Encode a BAM record.
    :param cigar: Iterable of (op length, op code) tuples.
    :param sequence: str over =ACMGRSVTWYHKDBN.
    :param quality: Iterable of phred scores, None stores the 0xFF missing marker.
    :return: bytes including the block_size field.
    """
    name = name + b'\0'
    cigar_data = b''.join(struct.pack('<I', length << 4 | op) for length, op in cigar)
    codes = [SEQUENCE_SYMBOLS.index(symbol) for symbol in sequence.encode('ASCII')]
    if len(codes) % 2:
        codes.append(0)
    sequence_data = bytes(codes[i] << 4 | codes[i + 1] for i in range(0, len(codes), 2))
    quality_data = bytes(quality) if quality is not None else b'\xff' * len(sequence)
    data = name + cigar_data + sequence_data + quality_data + tags
    core = struct.pack('<iiiBBHHHiiii', 32 + len(data), reference_id, position, len(name), mapping_quality, 4680, len(cigar),
                       flag, len(sequence), next_reference_id, next_position, template_length)
    return core + data


def raw_record(**fields) -> RawRecord:
    return RawRecord.from_buffer(pack_record(**fields))


def pack_bam_header(text: bytes = b'', references=()) -> bytes:
    """
    Encode the BAM magic, header text and reference arrays.
    :param references: Iterable of (name, length) tuples.
    """
    data = b'BAM\x01' + struct.pack('<i', len(text)) + text + struct.pack('<i', len(references))
    for name, length in references:
        name = name.encode('ASCII') + b'\0'
        data += struct.pack('<i', len(name)) + name + struct.pack('<i', length)
    return data


def bgzf_block(data: bytes) -> bytes:
    compressor = zlib.compressobj(6, zlib.DEFLATED, -15)
    cdata = compressor.compress(data) + compressor.flush()
    size = 18 + len(cdata) + 8
    header = b'\x1f\x8b\x08\x04\x00\x00\x00\x00\x00\xff' + struct.pack('<H', 6) + b'BC' + struct.pack('<HH', 2, size - 1)
    return header + cdata + struct.pack('<II', zlib.crc32(data), len(data))


def build_bam(records, references=(('chr1', 10000),), text=b'@HD\tVN:1.6\tSO:coordinate\n', eof=True):
    """
    BGZF compressed BAM file with the header in the first block and one block per record.
    :param records: Iterable of packed records.
    :return: Tuple containing (file bytes, list of record virtual offsets, virtual offset of the end of the last record).
    """
    blocks = [bgzf_block(pack_bam_header(text, references))]
    offset = len(blocks[0])
    voffsets = []
    for record in records:
        voffsets.append(offset << 16)
        block = bgzf_block(record)
        blocks.append(block)
        offset += len(block)
    if eof:
        blocks.append(EMPTY_BLOCK)
    return b''.join(blocks), voffsets, offset << 16


def build_bai(chunks_by_reference, n_no_coor=None) -> bytes:
    """
    BAI index storing every chunk of a reference in bin 0, without a linear index.
    :param chunks_by_reference: List with one list of (begin, end) virtual offsets per reference.
    """
    data = b'BAI\x01' + struct.pack('<i', len(chunks_by_reference))
    for chunks in chunks_by_reference:
        if chunks:
            data += struct.pack('<i', 2)
            data += struct.pack('<Ii', 0, len(chunks)) + b''.join(struct.pack('<QQ', begin, end) for begin, end in chunks)
            # Pseudo bin with mapped/unmapped counts
            data += struct.pack('<Ii', 37450, 2) + struct.pack('<QQQQ', chunks[0][0], chunks[-1][1], 1, 0)
        else:
            data += struct.pack('<i', 0)
        data += struct.pack('<i', 0)
    if n_no_coor is not None:
        data += struct.pack('<Q', n_no_coor)
    return data


class FakeHandle:
    def __init__(self, items):
        self.items = list(items)
        self.closed = False

    def close(self):
        self.closed = True


class FakeStore(AlignmentStore):
    """
    AlignmentStore serving scripted records. Items that are exceptions are raised when reached.
    Every call is recorded in calls.
    """
    format = 'fake'

    def __init__(self, items=(), text=b'', references=(), index=None, indexable=False, requires_reference=False,
                 close_error=None, header_error=None):
        self.items = list(items)
        self.text = text
        self.references = list(references)
        self.index = index
        self.indexable = indexable
        self.requires_reference = requires_reference
        self.close_error = close_error
        self.header_error = header_error
        self.handles = []
        self.calls = []

    def read_header(self):
        self.calls.append('read_header')
        if self.header_error is not None:
            raise self.header_error
        return self.text, [name for name, _ in self.references], [length for _, length in self.references]

    @staticmethod
    def _pop(items):
        if not items:
            raise EOFError()
        item = items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def read_next(self):
        return self._pop(self.items)

    def load_index(self):
        self.calls.append('load_index')
        return self.index

    def bounded_iterator(self, index, tid, start, end):
        self.calls.append(('bounded_iterator', tid, start, end))
        if end < start:
            raise ValueError("Invalid interval")
        handle = FakeHandle(self.items)
        self.handles.append(handle)
        return handle

    def bounded_read_next(self, handle):
        return self._pop(handle.items)

    def set_block_size(self, size):
        self.calls.append(('set_block_size', size))

    def set_reference(self, path):
        self.calls.append(('set_reference', path))

    def use_embedded_reference(self):
        self.calls.append('use_embedded_reference')

    def close(self):
        self.calls.append('close')
        if self.close_error is not None:
            raise self.close_error


def opener(store):
    return lambda locator, mode: store
