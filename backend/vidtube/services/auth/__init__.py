"""Account and session lifecycle service."""
