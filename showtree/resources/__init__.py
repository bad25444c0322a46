"""Package data: the default studio schema."""
