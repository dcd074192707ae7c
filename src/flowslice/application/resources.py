"""
Class exclusions.

An exclusions file lists one regular expression per line, matched against
slash-separated class names (``java/awt/Frame``). Procedures of matching
classes are dropped when a program model is loaded, which keeps library
internals out of the call graph and so out of every slice. Blank lines and
lines starting with ``#`` are ignored.

The default list ships inside the package; it is acquired as a real file
for the duration of a ``with`` block and released afterwards.
"""

import contextlib
import importlib.resources
import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from flowslice.application.errors import InvalidModel

logger = logging.getLogger(__name__)

DEFAULT_EXCLUSIONS = "exclusions.txt"


@contextlib.contextmanager
def exclusions_file(path: Optional[Union[str, Path]] = None) -> Iterator[Path]:
    """
    Yield the path of an exclusions file.

    Args:
        path: Explicit file, or None for the packaged default
    """
    if path is not None:
        yield Path(path)
        return
    resource = importlib.resources.files("flowslice.data") / DEFAULT_EXCLUSIONS
    with importlib.resources.as_file(resource) as packaged:
        yield packaged


class ExclusionSet(object):
    """
    Compiled exclusion patterns.

    Attributes:
        patterns: Source text of each pattern, in file order
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: List[str] = []
        self._compiled = []
        for pattern in patterns:
            pattern = pattern.strip()
            if not pattern or pattern.startswith("#"):
                continue
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                raise InvalidModel("bad exclusion pattern %r: %s" % (pattern, e)) from e
            self.patterns.append(pattern)
            self._compiled.append(compiled)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "ExclusionSet":
        """Read an exclusions file; None reads the packaged default."""
        with exclusions_file(path) as resolved:
            with open(resolved, encoding="utf-8") as f:
                exclusions = cls(f.read().splitlines())
        logger.debug("loaded %d exclusion patterns from %s", len(exclusions), resolved)
        return exclusions

    def excludes(self, class_path: str) -> bool:
        """True if the slash-separated class name matches any pattern."""
        return any(p.fullmatch(class_path) for p in self._compiled)

    def __len__(self):
        return len(self.patterns)

    def __repr__(self):
        return "ExclusionSet(%d patterns)" % len(self.patterns)
