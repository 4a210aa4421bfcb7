"""Disputes app: post-rental complaints and their resolution."""
