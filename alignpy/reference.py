from .util import Slotted


class ContigInfo(Slotted):
    """
    Represents a reference sequence to which records are aligned.
    """
    __slots__ = 'name', 'n_bases', 'pos_in_fasta'

    def __init__(self, name: str, n_bases: int, pos_in_fasta: int = 0):
        """
        Constructor.
        :param name: Reference sequence name.
        :param n_bases: Total length of the reference sequence.
        :param pos_in_fasta: Index used to dereference record reference ids, the order the reference appears in the file.
        """
        self.name = name
        self.n_bases = n_bases
        self.pos_in_fasta = pos_in_fasta

