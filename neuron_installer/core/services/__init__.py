"""Stage services — one module per pipeline stage, plus prompts and the launcher."""
