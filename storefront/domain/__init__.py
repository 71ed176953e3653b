"""Domain layer: schemas, reconciliation, address selection, checkout rules."""
