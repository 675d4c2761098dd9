"""
ShipIt fleet control - restart, stop or refresh keys on ShipIt workers.

Runs one fixed remote command per build server over SSH through the
AOSC relay host and reports per-host results.
"""

__version__ = "0.1.0"
__author__ = "AOSC ShipIt Maintainers"
