"""Down-The-Line clay target shot tracker."""

__version__ = "0.1.0"
