from .orchestrator import QueryOrchestrator
from .weather import WeatherGateway

__all__ = ["QueryOrchestrator", "WeatherGateway"]
