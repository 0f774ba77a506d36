from .metrics import RotationMetrics, RotationStats

__all__ = ["RotationMetrics", "RotationStats"]
