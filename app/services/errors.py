"""Service-level errors."""


class EntryNotFoundError(ValueError):
    """Time entry does not exist or the id is malformed."""


class EntryLockedError(ValueError):
    """Time entry has been approved and can no longer be edited."""


class ClockStateError(ValueError):
    """Clock-in or clock-out does not match the employee's current state."""
