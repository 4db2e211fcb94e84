"""Chat transport and balance store contracts plus their implementations."""
