"""
Booking Core
============

Availability resolution for the booking dashboard.

This package provides:
- Layered weekly hours (resource, offering, organization, defaults)
- Date gating with blackouts and booking windows
- Fixed-duration slot generation and managed slot inventory
- Slot admission with notice, buffers, blocks and booking caps
"""

__version__ = "1.0.0"
