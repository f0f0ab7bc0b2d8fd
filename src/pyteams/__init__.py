"""Team balancing and slot assignment for recreational football matches."""

__version__ = "0.1.0"
