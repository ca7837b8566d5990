"""Statement builders."""
