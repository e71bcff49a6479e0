from .wavecar import (
    WavecarReader, KpointData, BadWavecarFile
)
from .outcar import (
    OutcarReader, BadOutcarFile
)
from .ldos import (
    LdosWriter, LdosHeader, LdosData, read_ldos_header, read_ldos
)

__all__ = [
    "WavecarReader","KpointData","BadWavecarFile",
    "OutcarReader","BadOutcarFile",
    "LdosWriter","LdosHeader","LdosData","read_ldos_header","read_ldos",
]
