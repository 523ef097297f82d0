from __future__ import annotations

import logging

from ..common.validators import require_year
from ..core.constants import GRADUATED_YEAR, MAX_YEAR
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class CohortPromotionJob:
    """Administrator batch: move every student of one year up, or graduate the final year.

    Each run is a single predicate update, so running it again for the same
    year finds nobody left to move.
    """

    def __init__(self, students: StudentRepository):
        self._students = students

    def promote(self, target_year) -> int:
        year = require_year(target_year, "target_year")

        if year == MAX_YEAR:
            count = self._students.graduate_year(from_year=year, graduated_year=GRADUATED_YEAR)
            logger.info("graduated %d final year students", count)
        else:
            count = self._students.promote_year(from_year=year)
            logger.info("promoted %d students from year %d to %d", count, year, year + 1)
        return count
