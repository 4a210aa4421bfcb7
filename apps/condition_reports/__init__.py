"""Condition reports app: the pickup and return photo handshake."""
