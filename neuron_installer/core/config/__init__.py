"""Configuration — built-in project table and optional installer.yml overrides."""
