"""Application use cases built on top of the domain layer."""
