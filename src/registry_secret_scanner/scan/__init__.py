"""Content scanning and scan orchestration."""
