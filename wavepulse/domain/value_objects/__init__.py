"""Domain value objects."""
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame

__all__ = ["IndicatorFrame"]
