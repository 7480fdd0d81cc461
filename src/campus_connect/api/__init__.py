"""HTTP transport for Campus Connect."""
