"""
Error handling for flowslice.

This module defines the exception classes raised by the program model, the
criterion helpers and the slice engine. Every error is recoverable: the
engine keeps no state between runs, so a caller can catch any of them,
fix the input (for example by rebuilding the call graph) and try again.

All errors derive from SliceError so a driver can tell "no slice is
possible for this input" apart from a bug in the engine.
"""


class SliceError(Exception):
    """Base class for every error reported by flowslice."""
    pass


class OutOfRangeStatement(SliceError, IndexError):
    """
    Exception raised when a statement is built with an invalid index.

    Attributes:
        context: The procedure context the statement was built for
        index: The offending instruction, parameter or argument index
    """

    def __init__(self, context, index, message=None):
        self.context = context
        self.index = index
        if message is None:
            message = "index %r is out of range for %r" % (index, context)
        SliceError.__init__(self, message)


class UnknownContext(SliceError, LookupError):
    """
    Exception raised when a statement refers to a procedure context that is
    not part of the call graph being sliced.

    Attributes:
        context: The foreign procedure context
    """

    def __init__(self, context):
        self.context = context
        SliceError.__init__(self, "%r is not a node of the call graph" % (context,))


class MethodNotFound(SliceError, LookupError):
    """Exception raised when no call-graph node implements a method."""

    def __init__(self, method):
        self.method = method
        SliceError.__init__(self, "failed to find method %s" % method)


class CallSiteNotFound(SliceError, LookupError):
    """
    Exception raised when a procedure context contains no call to the
    requested target.

    Attributes:
        context: The context that was scanned
        method: The declared target that was looked for
    """

    def __init__(self, context, method):
        self.context = context
        self.method = method
        SliceError.__init__(self, "failed to find call to %s in %r" % (method, context))


class AmbiguousCallSite(SliceError):
    """
    Exception raised when several instruction indices belong to the same
    source call expression.

    Attributes:
        context: The context that was scanned
        site: The call site identifier
        indices: The instruction indices attributed to the site
    """

    def __init__(self, context, site, indices):
        self.context = context
        self.site = site
        self.indices = tuple(indices)
        SliceError.__init__(
            self,
            "expected 1 instruction for call site %r in %r but got %d"
            % (site, context, len(self.indices)),
        )


class VoidReturnCriterion(SliceError, ValueError):
    """
    Exception raised when a return-value criterion is requested for a call
    whose declared target returns no value.

    Attributes:
        method: The void method reference
    """

    def __init__(self, method):
        self.method = method
        SliceError.__init__(
            self,
            "forward slices are computed from the return value of calls; "
            "method %s returns void" % method,
        )


class NoCallersFound(SliceError, LookupError):
    """Exception raised when a method has no callers in the call graph."""

    def __init__(self, method):
        self.method = method
        SliceError.__init__(self, "failed to find callers for %s" % method)


class SliceTruncated(SliceError):
    """
    Exception raised when a slice grows past the configured budget.

    No partial slice is returned; the caller may retry with a larger
    budget or a weaker dependence configuration.

    Attributes:
        limit: The maximum number of statements that was allowed
    """

    def __init__(self, limit):
        self.limit = limit
        SliceError.__init__(self, "slice exceeded %d statements" % limit)


class InvalidSignature(SliceError, ValueError):
    """Exception raised for a malformed method signature."""

    def __init__(self, signature, reason):
        self.signature = signature
        self.reason = reason
        SliceError.__init__(self, "invalid method signature %r: %s" % (signature, reason))


class InvalidModel(SliceError, ValueError):
    """Exception raised when a program model document is malformed."""
    pass


class UnknownAnalysis(SliceError, LookupError):
    """
    Exception raised when a program model holds no snapshot for the
    requested analysis precision.

    Attributes:
        name: The requested analysis name
        available: Names of the analyses the model does provide
    """

    def __init__(self, name, available):
        self.name = name
        self.available = tuple(available)
        SliceError.__init__(
            self,
            "unknown analysis %r (available: %s)" % (name, ", ".join(self.available) or "none"),
        )
