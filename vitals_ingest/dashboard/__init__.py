from .assembler import DEFAULT_RANGE_MS, DashboardAssembler
from .models import DashboardData

__all__ = ["DEFAULT_RANGE_MS", "DashboardAssembler", "DashboardData"]
