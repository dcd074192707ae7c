"""
Method references and JVM-style signature parsing.

Criteria are given on the command line as bytecode signatures, the form
printed by ``javap -s``::

    Example.bye(Ljava/lang/String;)Ljava/lang/String;

A signature is split into the declaring class (``Example``), the method
name (``bye``) and the descriptor (``(Ljava/lang/String;)Ljava/lang/String;``).
The descriptor grammar is the usual one:

- primitive types ``B C D F I J S Z``
- ``V`` for void, only in return position
- object types ``Lpkg/Name;``
- array types ``[T``
"""

from typing import List, Tuple

from flowslice.application.errors import InvalidSignature
from flowslice.util.canonical import CanonicalObject

PRIMITIVES = frozenset("BCDFIJSZ")
VOID = "V"


def _parseType(signature: str, descriptor: str, pos: int) -> Tuple[str, int]:
    """
    Parse one field type starting at ``pos``.

    Returns:
        Tuple of (type descriptor, position after it)
    """
    start = pos
    while pos < len(descriptor) and descriptor[pos] == "[":
        pos += 1
    if pos >= len(descriptor):
        raise InvalidSignature(signature, "truncated type")

    c = descriptor[pos]
    if c in PRIMITIVES:
        return descriptor[start:pos + 1], pos + 1
    if c == "L":
        end = descriptor.find(";", pos)
        if end < 0 or end == pos + 1:
            raise InvalidSignature(signature, "unterminated object type")
        return descriptor[start:end + 1], end + 1
    raise InvalidSignature(signature, "unexpected %r in descriptor" % c)


def parseDescriptor(signature: str, descriptor: str) -> Tuple[Tuple[str, ...], str]:
    """
    Split a method descriptor into parameter types and return type.

    Args:
        signature: Full signature, used for error messages
        descriptor: The ``(ARGS)RET`` part of the signature

    Returns:
        Tuple of (parameter type tuple, return type)

    Raises:
        InvalidSignature: If the descriptor is malformed
    """
    if not descriptor.startswith("("):
        raise InvalidSignature(signature, "descriptor must start with '('")

    params: List[str] = []
    pos = 1
    while True:
        if pos >= len(descriptor):
            raise InvalidSignature(signature, "missing ')'")
        if descriptor[pos] == ")":
            pos += 1
            break
        param, pos = _parseType(signature, descriptor, pos)
        params.append(param)

    if descriptor[pos:] == VOID:
        return tuple(params), VOID
    ret, pos = _parseType(signature, descriptor, pos)
    if pos != len(descriptor):
        raise InvalidSignature(signature, "trailing characters after return type")
    return tuple(params), ret


class MethodReference(CanonicalObject):
    """
    A reference to a method: declaring class, name and descriptor.

    Two references are equal when all three parts are equal, which is how
    an ``Invoke``'s declared target is matched against a criterion.

    Attributes:
        declaring_class: Dotted class name (``com.example.Foo``)
        name: Method name
        descriptor: ``(ARGS)RET`` descriptor
        parameter_types: Parameter type descriptors
        return_type: Return type descriptor (``V`` for void)
    """
    __slots__ = "declaring_class", "name", "descriptor", "parameter_types", "return_type"

    def __init__(self, declaring_class: str, name: str, descriptor: str):
        signature = "%s.%s%s" % (declaring_class, name, descriptor)
        if not declaring_class or not name:
            raise InvalidSignature(signature, "missing class or method name")

        self.declaring_class = declaring_class
        self.name = name
        self.descriptor = descriptor
        self.parameter_types, self.return_type = parseDescriptor(signature, descriptor)
        self.setCanonical(declaring_class, name, descriptor)

    @classmethod
    def from_signature(cls, signature: str) -> "MethodReference":
        """
        Parse a ``Class.method(ARGS)RET`` signature.

        Raises:
            InvalidSignature: If the signature is malformed
        """
        if not isinstance(signature, str):
            raise InvalidSignature(signature, "expected a string")
        signature = signature.strip()
        paren = signature.find("(")
        if paren < 0:
            raise InvalidSignature(signature, "missing descriptor")
        head, descriptor = signature[:paren], signature[paren:]
        dot = head.rfind(".")
        if dot <= 0:
            raise InvalidSignature(signature, "missing declaring class")
        return cls(head[:dot].replace("/", "."), head[dot + 1:], descriptor)

    @property
    def signature(self) -> str:
        return "%s.%s%s" % (self.declaring_class, self.name, self.descriptor)

    @property
    def selector(self) -> str:
        """Name and descriptor, without the declaring class."""
        return self.name + self.descriptor

    @property
    def class_path(self) -> str:
        """Slash-separated class name, the form exclusion patterns match."""
        return self.declaring_class.replace(".", "/")

    @property
    def returns_void(self) -> bool:
        return self.return_type == VOID

    def __str__(self):
        return self.signature

    def __repr__(self):
        return "MethodReference(%s)" % self.signature
