"""
Canonical object management for the program model and the slicer.

Canonicalization ensures equivalent objects compare and hash alike. The
slicer relies on it for every value-like entity it keeps in sets and
dictionaries: method references, procedure contexts, heap locations and
statements are all compared by the tuple of values that defines them.

Key concepts:
- CanonicalObject: Base class for objects that are compared by canonical values
- Sentinel: Special marker objects for representing sentinel values
"""


class Sentinel(object):
    """
    A sentinel object used as a special marker value.

    The control-flow graphs use sentinels for their ENTRY and EXIT nodes so
    they can never collide with an instruction index.

    Attributes:
        name: String identifier for this sentinel

    Example:
        >>> ENTRY = Sentinel("ENTRY")
        >>> ENTRY
        ENTRY
        >>> ENTRY == Sentinel("ENTRY")
        False  # Different instances
    """
    __slots__ = "name", "__weakref__"

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return self.name


class CanonicalObject(object):
    """
    Base class for objects that are compared by their canonical values.

    Canonical objects are equal if they have the same type and the same
    canonical values (the arguments passed to setCanonical). The hash is
    computed once, so canonical objects are cheap to keep in the large
    visited sets built while slicing.

    Attributes:
        canonical: Tuple of canonical values that define this object's identity
        hash: Precomputed hash value for efficient hashing

    Example:
        >>> class Point(CanonicalObject):
        ...     pass
        >>> Point(1, 2) == Point(1, 2)
        True
    """
    __slots__ = "canonical", "hash", "__weakref__"

    def __init__(self, *args):
        self.setCanonical(*args)

    def setCanonical(self, *args):
        """
        Set the canonical values for this object.

        Args:
            *args: Values that define this object's canonical identity
        """
        self.canonical = args
        # Hash combines type identity with canonical values
        self.hash = hash((type(self).__name__, args))

    def __hash__(self):
        return self.hash

    def __eq__(self, other):
        return type(self) == type(other) and self.canonical == other.canonical

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        canonicalStr = ", ".join([repr(obj) for obj in self.canonical])
        return "%s(%s)" % (type(self).__name__, canonicalStr)
