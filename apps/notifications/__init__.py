"""Notifications app: push-delivery sink boundary and the in-app inbox."""
