# ldoskit/__init__.py
__version__ = "1.0.0"

from .io import WavecarReader, KpointData, BadWavecarFile, OutcarReader, LdosWriter, read_ldos
from .pipeline import process, choose_height_direction, LdosStatistics, BadSupercellError
from .mapping import HeightDirection

__all__ = [
    "__version__",
    "WavecarReader", "KpointData", "BadWavecarFile", "OutcarReader", "LdosWriter", "read_ldos",
    "process", "choose_height_direction", "LdosStatistics", "BadSupercellError",
    "HeightDirection",
]
