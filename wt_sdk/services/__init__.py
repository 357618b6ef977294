"""Transfer and board services."""
