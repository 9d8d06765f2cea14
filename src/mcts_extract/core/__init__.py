"""Core data structures: e-graph view, extraction state, terms, costs."""
