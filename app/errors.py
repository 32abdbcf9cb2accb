from typing import List


class HandoffError(Exception):
    """Base class for failures scoped to a single dashboard operation."""


class SignoffValidationError(HandoffError):
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__("Please fill: " + ", ".join(self.missing) + ".")


class PersistenceError(HandoffError):
    """The backing store rejected or failed a call. Safe to retry with the same input."""


class UnknownHandoffError(HandoffError):
    def __init__(self, handoff_id: str):
        self.handoff_id = handoff_id
        super().__init__(f"handoff {handoff_id} not found")


class AlreadySignedOffError(HandoffError):
    def __init__(self, handoff_id: str):
        self.handoff_id = handoff_id
        super().__init__(f"handoff {handoff_id} is already signed off")
