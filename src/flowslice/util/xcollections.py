"""
Extended collections used for lazily built analysis indexes.
"""

from collections import defaultdict


class lazydict(defaultdict):
    """
    A defaultdict that passes the key to the factory function.

    Unlike the standard defaultdict, which calls the factory with no arguments,
    lazydict passes the missing key as an argument to the factory function.
    The dependence graph uses it to build one index per procedure the first
    time a statement of that procedure is expanded.

    Example:
        >>> d = lazydict(lambda key: f"value_for_{key}")
        >>> d["foo"]
        'value_for_foo'
        >>> "foo" in d
        True
    """
    __slots__ = ()

    def __missing__(self, key):
        result = self.default_factory(key)
        self[key] = result
        return result
