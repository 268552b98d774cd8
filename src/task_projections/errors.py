"""Error kinds raised by the projection engine."""


class ValidationError(ValueError):
    """Malformed input value (due date, status)."""


class UnknownTaskError(KeyError):
    """Task id is not part of the current snapshot."""


class CyclicParentError(ValueError):
    """Parent edge would turn the task hierarchy into a cycle."""


class TransitionError(Exception):
    """Base class for board transition failures."""

    def __init__(self, task_id: str, message: str) -> None:
        super().__init__(message)
        self.task_id = task_id


class TransitionRejected(TransitionError):
    """Persistence declined a status change; the board was rolled back."""

    def __init__(self, task_id: str, from_status: str, to_status: str, reason: str) -> None:
        super().__init__(
            task_id, f"Transition of {task_id} from {from_status} to {to_status} rejected: {reason}"
        )
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason


class ConcurrentTransitionConflict(TransitionError):
    """A transition for the same task is already in flight."""

    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, f"Transition already pending for task {task_id}")
