from .environments import Environment
from .streams import Streams
from .windows import Windows

__all__ = ["Environment", "Streams", "Windows"]
