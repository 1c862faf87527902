"""Key encoding, selectors, iterators, storage options and serializers for an ordered key-value table store."""

__version__ = "0.1.0"