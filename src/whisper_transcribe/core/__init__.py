"""Request orchestration."""
