"""Shell adapters — subprocess commands and filesystem operations."""
