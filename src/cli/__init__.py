"""Command-line interface: ledger ingest | match | exposure | health."""
