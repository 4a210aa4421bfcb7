"""Chat app: per-reservation conversation projected from reservation events."""
