from __future__ import annotations

import json

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from schoolgrid.core.calendar import DayToken, order_days


class DayTokenSet(TypeDecorator):
    """Persist a set of day tokens as a JSON array in canonical week order.

    Rows read back as ``frozenset[DayToken]`` so callers never see the
    encoded string.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = json.loads(value)
        return json.dumps([day.value for day in order_days(value)])

    def process_result_value(self, value, dialect) -> frozenset[DayToken] | None:
        if value is None:
            return None
        return frozenset(order_days(json.loads(value)))
