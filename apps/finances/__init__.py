"""Finances app: pricing, payment gateways and the deposit ledger."""
