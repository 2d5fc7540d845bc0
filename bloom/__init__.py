"""Bloom — domain data and policy layer for a cycle and wellness tracker.

Subpackages:
    storage/      — Entity Store over pluggable backends (memory, file, Postgres)
    models/       — Pydantic record schemas
    services/     — Cipher, audit trail, payments, insight generation, container
    repositories/ — Per-family repositories scoped by user
    workflows/    — Booking and subscription state machines
    cycle/        — Cycle day, phase and hormone-curve derivation
    catalog/      — Plans, providers and articles reference data
    routers/      — FastAPI surface
"""
