# tollgate/errors.py
"""
Exceptions for the toll pipeline.

Unregistered vehicles and insufficient funds are NOT exceptions: the
processor returns them as TollResult outcomes. Only conditions that break
a load step or the durability guarantee are raised.
"""


class PersistenceUnavailable(RuntimeError):
    """Ledger storage cannot be opened or written. Fatal at startup."""


class MalformedRecord(ValueError):
    """A single config line or registry row could not be parsed."""


class DuplicateVehicle(ValueError):
    """Registration conflicts with an existing RFID tag or plate."""
