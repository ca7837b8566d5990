"""Schema management: database administration and Alembic migrations."""
