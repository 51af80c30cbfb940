"""Settlement computation, split building and reconciliation."""
