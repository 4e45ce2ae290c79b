# Import needed libraries
from dataclasses import dataclass, fields


# Exceptions
class ZirconAgeError(Exception):
    pass


class PathSelectionError(ZirconAgeError):
    def __init__(self, message, longest_trace=0.0, time_zr_growth=0.0):
        super().__init__(message)
        self.longest_trace = longest_trace
        self.time_zr_growth = time_zr_growth


class RaggedInputError(ZirconAgeError, ValueError):
    pass


class SaturationCurveError(ZirconAgeError):
    pass


@dataclass(frozen=True)
class ZirconAgeData:
    """
    Parameters for the zircon age calculations.

    Attributes
    ----------
    tsat : float, default=825.0
        Maximum zircon saturation temperature in °C.
    tmin : float, default=690.0
        Minimum zircon saturation temperature in °C.
    tsol : float, default=690.0
        Solidus temperature in °C.
    tcal_max : float, default=800.0
        Maximum temperature used to calculate the zircon fraction in °C.
    tcal_step : float, default=1.0
        Temperature step used to discretize the zircon saturation curve in °C.
    max_x_zr : float, default=0.001
        Maximum zircon fraction at the solidus.
    zircon_number : int, default=100
        Number of zircons, sets the resolution of the fitted zircon curve.
    time_zr_growth : float, default=0.7e6
        Minimum time a Tt-path has to spend within the saturation range to grow
        measurable zircons in years.
    """

    tsat: float = 825.0
    tmin: float = 690.0
    tsol: float = 690.0
    tcal_max: float = 800.0
    tcal_step: float = 1.0
    max_x_zr: float = 0.001
    zircon_number: int = 100
    time_zr_growth: float = 0.7e6

    def __post_init__(self):
        if self.tcal_step <= 0.0:
            raise ValueError(
                f"Temperature calculation step must be positive, got {self.tcal_step}."
            )

    @classmethod
    def from_params(cls, params):
        """Creates zircon age data from a dictionary of model parameters."""
        return cls(**{f.name: params[f.name] for f in fields(cls) if f.name in params})
