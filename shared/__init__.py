"""
Shared Kernel

Base classes, value objects, errors and application plumbing used by
every rental context (reservations, condition reports, deposits, disputes).
"""
