"""hookpull: pull local git working copies when a push webhook arrives."""

__version__ = "0.1.0"
