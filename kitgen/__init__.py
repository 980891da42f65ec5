"""Go server handler code and HTTP binding descriptions from a service definition."""

__version__ = "0.1.0"