"""Core utilities: configuration, errors, notifications, navigation."""
