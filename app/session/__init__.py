"""Per-connection session orchestration."""
