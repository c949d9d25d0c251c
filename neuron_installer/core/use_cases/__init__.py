"""Use cases — entry-point orchestration shared by every CLI command."""
