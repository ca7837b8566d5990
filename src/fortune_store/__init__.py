"""Fortune Store: instrumented, batched database access for the fortune service."""

__version__ = "0.1.0"
