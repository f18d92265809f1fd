import logging
import uuid
from collections import OrderedDict

from resumind.models.submission import Idle, NavigatingAway, ProcessState
from resumind.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

MAX_TRACKED_ATTEMPTS = 1000


class AttemptNotFound(Exception):
    pass


class AttemptRegistry:
    """
    In-memory index of submission attempts and their latest observed state.

    A service is released as soon as its attempt navigates away; only the
    final state is kept. At most `max_attempts` states are tracked, the least
    recently updated attempt is forgotten first.
    """

    def __init__(self, max_attempts: int = MAX_TRACKED_ATTEMPTS) -> None:
        self._max_attempts = max_attempts
        self._services: dict[str, SubmissionService] = {}
        self._states: OrderedDict[str, ProcessState] = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def active(self) -> int:
        """Number of attempts whose service is still held."""
        return len(self._services)

    def _record(self, attempt_id: str, state: ProcessState) -> None:
        self._states[attempt_id] = state
        self._states.move_to_end(attempt_id)
        if isinstance(state, NavigatingAway):
            self._services.pop(attempt_id, None)
        while len(self._states) > self._max_attempts:
            evicted, _ = self._states.popitem(last=False)
            self._services.pop(evicted, None)
            logger.debug("[attempts] evicted | attempt_id=%s", evicted)

    def register(self, service: SubmissionService, initial: ProcessState | None = None) -> str:
        """
        Track a new attempt. `initial` is reported until the service publishes
        its first transition, so a queued attempt can be shown as already running.
        """
        attempt_id = uuid.uuid4().hex
        self._services[attempt_id] = service
        service.subscribe(lambda state: self._record(attempt_id, state))
        self._record(attempt_id, initial or Idle())
        logger.debug("[attempts] registered | attempt_id=%s", attempt_id)
        return attempt_id

    def state(self, attempt_id: str) -> ProcessState:
        try:
            return self._states[attempt_id]
        except KeyError:
            raise AttemptNotFound(attempt_id) from None

    def reset(self, attempt_id: str) -> ProcessState:
        """'Try again' for an attempt. Finished attempts have nothing to reset."""
        state = self.state(attempt_id)
        service = self._services.get(attempt_id)
        if service is None:
            return state
        return service.reset()
