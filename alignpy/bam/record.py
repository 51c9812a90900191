import ctypes as C

from .packed_cigar import PackedCIGAR
from .packed_sequence import PackedSequence
from .util import BufferUnderflow, InvalidBAM, alignment_length

SIZEOF_UINT32 = C.sizeof(C.c_uint32)

SIZEOF_INT32 = C.sizeof(C.c_int32)


class RecordHeader(C.LittleEndianStructure):
    """
    Represents a BAM record header in memory
    """
    _pack_ = 1
    _fields_ = [
        ("block_size", C.c_int32),  # block_size Length of the remainder of the alignment record int32 t
        ("reference_id", C.c_int32),  # refID Reference sequence ID, −1 ≤ refID < n ref; -1 for a read without a mapping position. int32 t [-1]
        ("position", C.c_int32),  # pos 0-based leftmost coordinate (= POS − 1) int32 t [-1]
        ("name_length", C.c_uint8),  # l_read_name Length of read name below (= length(QNAME) + 1) uint8 t
        ("mapping_quality", C.c_uint8),  # mapq Mapping quality (=MAPQ) uint8 t
        ("bin", C.c_uint16),  # bin BAI index bin uint16 t
        ("cigar_length", C.c_uint16),  # n_cigar_op Number of operations in CIGAR uint16 t
        ("flag", C.c_uint16),  # flag Bitwise flags (= FLAG) uint16 t
        ("sequence_length", C.c_int32),  # l_seq Length of SEQ int32 t
        ("next_reference_id", C.c_int32),  # next_refID Ref-ID of the next segment (−1 ≤ mate refID < n ref) int32 t [-1]
        ("next_position", C.c_int32),  # next_pos 0-based leftmost pos of the next segment (= PNEXT − 1) int32 t [-1]
        ("template_length", C.c_int32),  # tlen Template length (= TLEN) int32 t [0]
    ]

    def __len__(self):
        return SIZEOF_RECORDHEADER


SIZEOF_RECORDHEADER = C.sizeof(RecordHeader)


class RawRecord:
    """
    A BAM alignment record exactly as it is framed in the file: the fixed length header and the variable length data block.
    Nothing is decoded until asked for, see alignpy.convert for the structured representation.
    """
    __slots__ = 'header', 'data'

    def __init__(self, header: RecordHeader, data):
        """
        Constructor.
        :param header: RecordHeader instance describing the data block.
        :param data: Buffer holding the name, cigar, sequence, quality scores and tags in that order.
        """
        self.header = header
        self.data = data

    def _offsets(self):
        """
        Calculates where each variable length field starts in the data block.
        :return: Tuple of offsets to (cigar, sequence, quality scores, tags).
        """
        header = self.header
        if header.name_length < 1:
            raise InvalidBAM("Record name length must include the NUL terminator.")
        if header.sequence_length < 0:
            raise InvalidBAM("Negative sequence length.")
        cigar = header.name_length
        sequence = cigar + header.cigar_length * SIZEOF_UINT32
        quality = sequence + (header.sequence_length + 1) // 2
        tags = quality + header.sequence_length
        if tags > len(self.data):
            raise InvalidBAM("Record data block is shorter than its header declares.")
        return cigar, sequence, quality, tags

    def validate(self) -> None:
        """
        Check that the data block holds every field the header declares.
        :return: None
        """
        self._offsets()

    @property
    def name(self) -> bytes:
        end = self.header.name_length - 1  # Exclude Null
        return bytes(self.data[:end])

    @property
    def cigar(self) -> PackedCIGAR:
        cigar, sequence, _, _ = self._offsets()
        return PackedCIGAR(self.data, cigar, self.header.cigar_length)

    @property
    def sequence(self) -> PackedSequence:
        _, sequence, quality, _ = self._offsets()
        return PackedSequence(memoryview(self.data)[sequence:quality], self.header.sequence_length)

    @property
    def quality_scores(self) -> memoryview:
        _, _, quality, tags = self._offsets()
        return memoryview(self.data)[quality:tags]

    @property
    def tags_offset(self) -> int:
        return self._offsets()[3]

    def end(self) -> int:
        """
        Reference position one past the last base covered by the alignment.
        Records without reference consuming operations cover one base.
        :return: 0-based exclusive end coordinate.
        """
        length = alignment_length(self.cigar)
        return self.header.position + (length or 1)

    @staticmethod
    def from_buffer(buffer, offset=0) -> 'RawRecord':
        """
        Copies one record out of a buffer holding BAM record data.
        :param buffer: The buffer to read from.
        :param offset: The offset into the buffer pointing at the first byte of the record.
        :return: An instance of RawRecord.
        """
        if len(buffer) - offset < SIZEOF_RECORDHEADER:
            raise BufferUnderflow()
        header = RecordHeader.from_buffer_copy(buffer, offset)
        start = offset + SIZEOF_RECORDHEADER
        end = offset + SIZEOF_INT32 + header.block_size
        if header.block_size < SIZEOF_RECORDHEADER - SIZEOF_INT32 or len(buffer) < end:
            raise BufferUnderflow()
        return RawRecord(header, bytearray(buffer[start:end]))

    @staticmethod
    def from_stream(stream) -> 'RawRecord':
        """
        Copies record data from the stream into memory.
        :param stream: The stream instance to read from (must have readinto() function).
        :return: An instance of the read record.
        """
        header = bytearray(SIZEOF_RECORDHEADER)
        read = stream.readinto(header)
        if read == 0:
            raise EOFError()
        if read != SIZEOF_RECORDHEADER:
            raise InvalidBAM("Truncated record header.")
        header = RecordHeader.from_buffer(header)
        data_len = header.block_size - SIZEOF_RECORDHEADER + SIZEOF_INT32
        if data_len < 0:
            raise InvalidBAM("Invalid record block size {}.".format(header.block_size))
        data = bytearray(data_len)
        if stream.readinto(data) != data_len:
            raise InvalidBAM("Unexpected data length.")
        record = RawRecord(header, data)
        record.validate()
        return record

    def __len__(self) -> int:
        """
        Returns the bytes length of the record.
        :return: The byte length of the record in memory
        """
        return self.header.block_size + SIZEOF_INT32

    def __repr__(self) -> str:
        return "RawRecord({!r}, flag={}, tid={}, pos={})".format(self.name, self.header.flag, self.header.reference_id, self.header.position)
