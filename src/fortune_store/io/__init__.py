"""I/O layer: database handle, schema management and repositories."""
