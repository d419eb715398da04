"""
Suppliers Module
================

Bounded Context for the support vendors tickets are filed against.

Responsibilities:
- Keep supplier records with their default SLA hours
- Answer SLA-hour lookups for ticket intake
"""
