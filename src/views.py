"""
Display state for a report view.
"""
import logging
from errors import DashboardError

logger = logging.getLogger(__name__)


class ReportView:
    """
    Holds what one report view shows: loading flag, data or error.

    Each refresh starts a new generation. When refreshes overlap, only the
    latest one may write the state; earlier results are dropped.
    """

    def __init__(self, name):
        self.name = name
        self.loading = False
        self.data = None
        self.error = None
        self._generation = 0

    async def refresh(self, compute):
        """
        Recompute the view with `compute`, a zero-argument coroutine function.

        Report errors become the view's error message and clear any data.
        Returns True when this refresh's outcome was applied.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None

        try:
            result = await compute()
        except DashboardError as e:
            if generation != self._generation:
                logger.debug(f"Discarding superseded error for view '{self.name}'")
                return False
            logger.error(f"View '{self.name}' failed: {str(e)}")
            self.data = None
            self.error = str(e)
            self.loading = False
            return True

        if generation != self._generation:
            logger.debug(f"Discarding superseded result for view '{self.name}'")
            return False

        self.data = result
        self.loading = False
        return True
