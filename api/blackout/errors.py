import uuid


class MatchingError(Exception):
    """Base error for the matching engine, carrying a machine-readable reason."""

    def __init__(self, reason: str, detail: str = "matching error"):
        self.reason = reason
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(detail)


class CycleInputError(MatchingError):
    """The cycle cannot run with the given inputs; nothing was written."""


class StoreUnavailableError(MatchingError):
    """A store could not be reached. Safe to retry the whole run."""


class MatchConflictError(MatchingError):
    """A participant already holds a match slot for the week."""

    def __init__(self, user_a_id: str, user_b_id: str, week_start, detail: str = "participant already matched this week"):
        self.user_a_id = user_a_id
        self.user_b_id = user_b_id
        self.week_start = week_start
        super().__init__("match_slot_taken", detail)
