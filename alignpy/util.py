class Slotted:
    """
    Base class for plain value objects declared with __slots__.
    Provides value equality and a repr listing every slot.
    """
    __slots__ = ()

    def _values(self):
        return tuple(getattr(self, name) for name in self.__slots__)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._values() == other._values()

    __hash__ = None

    def __repr__(self):
        return "{}({})".format(type(self).__name__, ", ".join("{}={!r}".format(name, getattr(self, name)) for name in self.__slots__))
