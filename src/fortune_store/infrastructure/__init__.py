"""Infrastructure helpers shared by the IO layer."""
