"""Reply provider implementations."""
