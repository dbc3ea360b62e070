"""Core value objects, configuration and logging."""
