from .location import LocationResolver
from .temporal import TemporalResolver, time_of_day_for_hour

__all__ = ["LocationResolver", "TemporalResolver", "time_of_day_for_hour"]
