"""Graph model, builders, cycle detection and coupling metrics."""
