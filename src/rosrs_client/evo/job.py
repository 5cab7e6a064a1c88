"""Status of asynchronous snapshot and archive jobs."""
from __future__ import annotations

import threading
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .types import EvoType


class JobState(str, Enum):
    """The job state, as reported by the evolution service."""

    RUNNING = "running"
    """The job has started and is running."""

    DONE = "done"
    """The job has finished successfully."""

    CANCELLED = "cancelled"
    """The job has been cancelled by the user."""

    FAILED = "failed"
    """The job has failed gracefully."""

    SERVICE_ERROR = "service_error"
    """There has been an unexpected error in the service."""

    @property
    def is_terminal(self) -> bool:
        return self is not JobState.RUNNING

    def __str__(self):
        return self.value

    @classmethod
    def _missing_(cls, value):
        # the service also sends the upper case names
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class JobStatusMessage(BaseModel):
    """JSON representation of a job status sent by the evolution service."""

    model_config = ConfigDict(populate_by_name=True)

    copyfrom: Optional[str] = None
    type: Optional[EvoType] = None
    finalize: Optional[bool] = None
    target: Optional[str] = None
    state: Optional[JobState] = Field(None, alias="status")
    reason: Optional[str] = None


class JobStatus:
    """Thread-safe status record of one remote snapshot or archive job.

    A single lock guards all fields, so the state and its reason are
    always read and written together.
    """

    State = JobState

    def __init__(
        self,
        copyfrom: Optional[str] = None,
        type: Optional[EvoType] = None,
        finalize: bool = False,
        *,
        job_uri: Optional[str] = None,
    ):
        self._lock = threading.Lock()
        self._copyfrom = copyfrom
        self._type = type
        self._finalize = finalize
        self._job_uri = job_uri
        self._target: Optional[str] = None
        self._state: Optional[JobState] = None
        self._reason: Optional[str] = None

    def __repr__(self):
        state, reason = self.state_and_reason()
        return f"JobStatus(copyfrom={self.copyfrom!r}, type={self.type}, state={state}, reason={reason!r})"

    @property
    def copyfrom(self) -> Optional[str]:
        """URI of the RO the job copies from."""
        with self._lock:
            return self._copyfrom

    @copyfrom.setter
    def copyfrom(self, value: Optional[str]):
        with self._lock:
            self._copyfrom = value

    @property
    def type(self) -> Optional[EvoType]:
        """Evolution class of the target RO."""
        with self._lock:
            return self._type

    @type.setter
    def type(self, value: Optional[EvoType]):
        with self._lock:
            self._type = value

    @property
    def finalize(self) -> bool:
        with self._lock:
            return self._finalize

    @finalize.setter
    def finalize(self, value: bool):
        with self._lock:
            self._finalize = value

    @property
    def target(self) -> Optional[str]:
        """Id or URI of the target RO."""
        with self._lock:
            return self._target

    @target.setter
    def target(self, value: Optional[str]):
        with self._lock:
            self._target = value

    @property
    def job_uri(self) -> Optional[str]:
        """URI at which the evolution service reports the job status."""
        with self._lock:
            return self._job_uri

    @job_uri.setter
    def job_uri(self, value: Optional[str]):
        with self._lock:
            self._job_uri = value

    @property
    def state(self) -> Optional[JobState]:
        """Current state, `None` until the service reported one."""
        with self._lock:
            return self._state

    @state.setter
    def state(self, value: Optional[JobState]):
        with self._lock:
            self._state = value

    @property
    def reason(self) -> Optional[str]:
        """Justification of the current state, useful in case of error."""
        with self._lock:
            return self._reason

    @reason.setter
    def reason(self, value: Optional[str]):
        with self._lock:
            self._reason = value

    def state_and_reason(self) -> Tuple[Optional[JobState], Optional[str]]:
        """Return the state together with its reason."""
        with self._lock:
            return self._state, self._reason

    def set_state_and_reason(self, state: Optional[JobState], reason: Optional[str]):
        """Set the state and its reason in one step."""
        with self._lock:
            self._state = state
            self._reason = reason

    @property
    def is_finished(self) -> bool:
        """Return whether the job reached a terminal state."""
        state = self.state
        return state is not None and state.is_terminal

    def update(self, msg: JobStatusMessage) -> None:
        """Apply a status message received from the evolution service."""
        with self._lock:
            if msg.copyfrom is not None:
                self._copyfrom = msg.copyfrom
            if msg.type is not None:
                self._type = msg.type
            if msg.target is not None:
                self._target = msg.target
            if msg.finalize is not None:
                self._finalize = msg.finalize
            if msg.state is not None:
                self._state = msg.state
                self._reason = msg.reason
