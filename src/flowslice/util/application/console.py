"""
Console output and timing utilities for slicing phases.

This module provides a hierarchical console output system with timing
capabilities, allowing structured reporting of driver phases (loading a
model, resolving criteria, slicing) with nested scopes and elapsed time
tracking.
"""

import sys
import time
from flowslice.util.io import formatting


class Scope(object):
    """Represents a hierarchical scope for timing and logging.

    Scopes form a tree structure where each scope can have children,
    allowing nested timing of driver phases.

    Attributes:
        parent: Parent scope, or None for root scope.
        name: Name of this scope.
    """

    def __init__(self, parent, name):
        """Initialize a new scope.

        Args:
            parent: Parent scope (None for root).
            name: Name identifier for this scope.
        """
        self.parent = parent
        self.name = name
        self._start = None
        self._end = None

    def begin(self):
        """Start timing this scope."""
        self._start = time.perf_counter()

    def end(self):
        """Stop timing this scope."""
        self._end = time.perf_counter()

    @property
    def elapsed(self):
        """Get elapsed time in seconds.

        Returns:
            Time elapsed between begin() and end() calls.
        """
        return self._end - self._start

    def path(self):
        """Get the full path from root to this scope.

        Returns:
            Tuple of scope names from root to this scope.
        """
        if self.parent is None:
            return ()
        else:
            return self.parent.path() + (self.name,)

    def child(self, name):
        """Create a child scope.

        Args:
            name: Name for the child scope.

        Returns:
            New Scope instance with this scope as parent.
        """
        return Scope(self, name)


class ConsoleScopeManager(object):
    """Context manager for console scopes.

    Example:
        with console.scope("slice"):
            # ... slicing ...
            pass  # Scope automatically ends here
    """

    __slots__ = "console", "name"

    def __init__(self, console, name):
        self.console = console
        self.name = name

    def __enter__(self):
        self.console.begin(self.name)

    def __exit__(self, type, value, tb):
        self.console.end()


class Console(object):
    """Hierarchical console output with timing and scoping.

    Scope begin/end lines are only written in verbose mode; the timing is
    always recorded so callers can report it.

    Attributes:
        out: Output stream (default: sys.stdout).
        root: Root scope of the hierarchy.
        current: Currently active scope.
        last: Most recently finished scope, or None.
        verbose: If True, enable verbose output mode.
    """

    def __init__(self, out=None, verbose=False):
        """Initialize console.

        Args:
            out: Output stream (default: sys.stdout).
            verbose: Enable verbose output mode.
        """
        if out is None:
            out = sys.stdout
        self.out = out

        self.root = Scope(None, "root")
        self.current = self.root
        self.last = None

        self.verbose = verbose

    def path(self):
        """Get formatted path string for current scope.

        Returns:
            String representation of current scope path, e.g., "[ load | 0cfa ]".
        """
        return "[ %s ]" % " | ".join(self.current.path())

    def begin(self, name):
        """Begin a new nested scope.

        Args:
            name: Name of the new scope.
        """
        scope = self.current.child(name)
        scope.begin()
        self.current = scope

        self.verbose_output("begin %s" % self.path(), 0)

    def end(self):
        """End the current scope and return to its parent."""
        self.current.end()
        self.verbose_output(
            "end   %s %s" % (self.path(), formatting.elapsedTime(self.current.elapsed)),
            0,
        )
        self.last = self.current
        self.current = self.current.parent

    def scope(self, name):
        """Create a context manager for a scope.

        Args:
            name: Name of the scope.

        Returns:
            ConsoleScopeManager instance for use with 'with' statement.
        """
        return ConsoleScopeManager(self, name)

    def output(self, s, tabs=1):
        """Write output to console.

        Args:
            s: String to output.
            tabs: Number of tab characters to indent (0 for no indentation).
        """
        if tabs:
            self.out.write("\t" * tabs)
        self.out.write(s)
        self.out.write("\n")

    def verbose_output(self, s, tabs=1):
        """Output only when verbose mode is enabled."""
        if self.verbose:
            self.output(s, tabs)
