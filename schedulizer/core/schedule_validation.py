from dataclasses import dataclass
from typing import Any, Iterable, Optional


MINUTES_PER_HOUR = 60

DAY_NAMES = ("domingo", "segunda", "terça", "quarta", "quinta", "sexta", "sábado")


@dataclass(frozen=True)
class ScheduleConflict:
    day_of_week: int

    @property
    def message(self) -> str:
        return f"Períodos sobrepostos no dia {self.day_of_week} ({DAY_NAMES[self.day_of_week]})"


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj[name]
    return getattr(obj, name)


def find_schedule_conflict(schedules: Iterable[Any]) -> Optional[ScheduleConflict]:
    """Retorna o primeiro dia (na ordem recebida) com períodos sobrepostos.

    Cada dia é avaliado isoladamente: ordena os períodos por start_time e
    compara cada um com o anterior. Períodos encostados (fim == início) não
    são sobreposição. Assume horários já validados no formato HH:MM.
    """
    for schedule in schedules:
        periods = sorted(_get(schedule, "periods"), key=lambda p: _get(p, "start_time"))
        for i in range(1, len(periods)):
            if _get(periods[i], "start_time") < _get(periods[i - 1], "end_time"):
                return ScheduleConflict(day_of_week=_get(schedule, "day_of_week"))
    return None


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * MINUTES_PER_HOUR + int(minutes)


def minutes_to_time(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, MINUTES_PER_HOUR)
    return f"{hours:02d}:{minutes:02d}"
