# sternkern/services/saga.py
import logging

from ..errors import ConsistencyError, SternkernError

logger = logging.getLogger(__name__)


class Saga:
    """
    Runs a fixed sequence of single writes. Each step may register an undo.
    If a step fails, the undos of the completed steps run newest first and a
    ConsistencyError is raised that names what completed, what was undone and
    what still needs manual correction.
    """

    def __init__(self, name):
        self.name = name
        self.completed = []
        self._compensations = []

    def step(self, label, action, compensate=None):
        try:
            result = action()
        except SternkernError as exc:
            if not self.completed:
                # Nothing was written yet, so the original error is accurate as is
                raise
            self._fail(label, exc)
        logger.info("%s: step '%s' done", self.name, label)
        self.completed.append(label)
        self._compensations.append((label, compensate))
        return result

    def _fail(self, label, exc):
        logger.error("%s: step '%s' failed after %s: %s", self.name, label, self.completed, exc)
        compensated, unresolved = [], []
        for done_label, compensate in reversed(self._compensations):
            if compensate is None:
                unresolved.append(done_label)
                continue
            try:
                compensate()
            except SternkernError as undo_exc:
                logger.error("%s: undo of '%s' failed: %s", self.name, done_label, undo_exc)
                unresolved.append(done_label)
            else:
                compensated.append(done_label)
        message = f"{self.name} failed at '{label}'"
        if unresolved:
            message += f"; manual correction needed for: {', '.join(unresolved)}"
        raise ConsistencyError(message, completed=self.completed, compensated=compensated,
                               unresolved=unresolved, cause=exc) from exc
