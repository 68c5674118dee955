"""Application services (use-case orchestration)."""
