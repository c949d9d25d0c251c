"""Persistence — append-only audit ledger of installer runs."""
