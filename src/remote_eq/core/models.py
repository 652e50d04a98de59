# src/remote_eq/core/models.py

"""Value types shared by the session, the response model and the renderer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .. import config


class BandType(str, Enum):
    """Filter shape of a band. Values are the strings used on the wire."""
    BELL = "bell"
    LOW_SHELF = "lowshelf"
    HIGH_SHELF = "highshelf"
    LOW_CUT = "lowcut"
    HIGH_CUT = "highcut"

    @classmethod
    def parse(cls, value):
        """
        Return the matching BandType, or the raw string when the kind is not
        known. Unknown kinds are kept so they round-trip and contribute 0 dB.
        """
        try:
            return cls(value)
        except ValueError:
            return str(value)


@dataclass(frozen=True)
class Band:
    """
    One adjustable filter stage.

    Attributes:
        kind (BandType | str): Shape of the filter.
        freq (float): Center/corner frequency in Hz.
        gain (float): Peak or shelf gain in dB. Unused by cut shapes.
        q (float): Quality factor. Unused by shelf shapes.
        enabled (bool): Disabled bands contribute nothing and cannot be picked.
    """
    kind: Union[BandType, str]
    freq: float
    gain: float = 0.0
    q: float = 1.0
    enabled: bool = False


def default_bands():
    """Fresh list of the configured default bands."""
    return [
        Band(BandType.parse(kind), float(freq), float(gain), float(q), bool(enabled))
        for kind, freq, gain, q, enabled in config.DEFAULT_BANDS
    ]


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session taken at draw time."""
    master_gain: float = 0.0
    power: bool = True
    connected: bool = False
    bands: Tuple[Band, ...] = field(default_factory=tuple)
    selected_index: Optional[int] = None

    @property
    def editable(self):
        return self.power and self.connected
