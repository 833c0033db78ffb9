"""Демонстрационный документ для разработки и ручной проверки"""

from datetime import datetime, timedelta
from typing import Optional

from core.models import AppData, DayColor, DayEntry, Goal
from core.operations import utc_timestamp
from utils.datetime_utils import now_local, to_date_key


def make_sample_app_data(now: Optional[datetime] = None) -> AppData:
    now = now or now_local()
    created = utc_timestamp()

    def day_n(n: int) -> str:
        return to_date_key(now - timedelta(days=n))

    goals = [
        Goal(id="g_hydrate", title="Hydrate (8 cups)", start_date=day_n(14), created_at=created),
        Goal(id="g_code", title="Code 30 minutes", start_date=day_n(6), created_at=created),
    ]

    days = [
        DayEntry(date=day_n(6), text="Started tracking. Felt good.", color=DayColor.GREEN,
                 completed_goals=["g_hydrate"]),
        DayEntry(date=day_n(5), text="Long day, low energy.", color=DayColor.YELLOW,
                 completed_goals=["g_hydrate"]),
        DayEntry(date=day_n(4), text="Great focus, shipped a feature!", color=DayColor.GREEN,
                 completed_goals=["g_hydrate", "g_code"]),
        DayEntry(date=day_n(3), text="Stalled a bit; need rest.", color=DayColor.YELLOW),
        DayEntry(date=day_n(2), text="Tough day.", color=DayColor.RED,
                 completed_goals=["g_hydrate"]),
        DayEntry(date=day_n(1), text="Solid progress on goals.", color=DayColor.GREEN,
                 completed_goals=["g_hydrate", "g_code"]),
        DayEntry(date=day_n(0), text="Steady and calm.", color=DayColor.GREEN,
                 completed_goals=["g_hydrate"]),
    ]

    return AppData(days=days, goals=goals)
