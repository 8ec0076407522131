"""HTTP layer: app factory, route table, dispatch and fault normalization."""
