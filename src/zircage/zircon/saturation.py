# Import needed libraries
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .loess import LoessFit
from .zircon_data import SaturationCurveError, ZirconAgeData


def zircon_fraction(temperature, max_x_zr):
    """Calculates the saturated zircon fraction for temperature(s) in °C (Tierney et al., 2016)."""
    temperature = np.asarray(temperature, dtype=float)
    x_zircon = (1.62 - 1.8e4 * np.exp(-1.0e4 / (temperature + 273.15))) * max_x_zr
    return np.where(x_zircon <= 0.0, 0.0, x_zircon)


def zircon_saturation_curve(zircon_data):
    """
    Calculates the rescaled number of zircons over the saturation range.

    Parameters
    ----------
    zircon_data : ZirconAgeData
        Zircon age calculation parameters.

    Returns
    -------
    temp_fit : numpy.ndarray
        Temperatures between the solidus and saturation temperatures in °C.
    n_zircon : numpy.ndarray
        Rescaled incremental number of zircons at temp_fit.
    """
    # Rounded so decimal steps still reach tcal_max
    n_steps = np.round((zircon_data.tcal_max - zircon_data.tsol) / zircon_data.tcal_step, 9)
    n_temp = int(np.floor(n_steps)) + 1
    if n_temp < 3:
        raise SaturationCurveError(
            f"Zircon saturation curve needs at least 3 points between tsol "
            f"({zircon_data.tsol}) and tcal_max ({zircon_data.tcal_max}), got {max(n_temp, 0)}."
        )
    temp = zircon_data.tsol + np.arange(n_temp) * zircon_data.tcal_step
    temp_fit = np.linspace(zircon_data.tsol, zircon_data.tsat, n_temp)

    # Incremental zircon fraction, first value copied from the second
    x_zircon = zircon_fraction(temp, zircon_data.max_x_zr)
    n_zircon = np.zeros(n_temp)
    n_zircon[1:] = -np.diff(x_zircon)
    n_zircon[0] = n_zircon[1]

    n_zircon_max = n_zircon.max()
    if n_zircon_max <= 0.0:
        raise SaturationCurveError(
            "Incremental zircon fraction is zero over the calculation range. "
            "Check max_x_zr, tsol and tcal_max."
        )
    n_zircon_scaled = n_zircon * zircon_data.zircon_number / n_zircon_max
    n_zircon = np.ceil(n_zircon_scaled - np.floor(n_zircon_scaled).min())

    return temp_fit, n_zircon


def loess_fit_zircon_sat(zircon_data=None):
    """Fits the number of zircons over the saturation range with a loess regression."""
    if zircon_data is None:
        zircon_data = ZirconAgeData()
    temp_fit, n_zircon = zircon_saturation_curve(zircon_data)
    return LoessFit(temp_fit, n_zircon, span=1.0, degree=2)


def _count_zircons(temps, n_zircon_fit, tsol, tsat):
    """Floors the fitted zircon number for temperatures within (tsol, tsat)."""
    n_zr = np.zeros_like(temps)
    in_range = (temps > tsol) & (temps < tsat)
    if in_range.any():
        n_zr[in_range] = np.floor(n_zircon_fit.predict(temps[in_range]))
    return n_zr


def compute_number_zircons(tt_paths_temp, zircon_data=None, n_workers=1):
    """
    Calculates the number of zircons for every time step of every Tt-path.

    Parameters
    ----------
    tt_paths_temp : numpy.ndarray
        Array of size (nt, npaths) with the temperature of every path in °C.
    zircon_data : ZirconAgeData, optional
        Zircon age calculation parameters. Defaults are used if None.
    n_workers : int, default=1
        Number of threads used to process blocks of paths.

    Returns
    -------
    n_zr : numpy.ndarray
        Array of size (nt, npaths) with the number of zircons.
    """
    if zircon_data is None:
        zircon_data = ZirconAgeData()
    tt_paths_temp = np.asarray(tt_paths_temp, dtype=float)
    n_zircon_fit = loess_fit_zircon_sat(zircon_data)
    n_zr = np.zeros_like(tt_paths_temp)
    npaths = tt_paths_temp.shape[1] if tt_paths_temp.ndim > 1 else 0

    if n_workers <= 1 or npaths < 2:
        return _count_zircons(tt_paths_temp, n_zircon_fit, zircon_data.tsol, zircon_data.tsat)

    # Paths are independent, so each thread fills its own block of columns
    def count_block(cols):
        n_zr[:, cols] = _count_zircons(
            tt_paths_temp[:, cols], n_zircon_fit, zircon_data.tsol, zircon_data.tsat
        )

    blocks = [cols for cols in np.array_split(np.arange(npaths), n_workers) if len(cols) > 0]
    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        list(pool.map(count_block, blocks))

    return n_zr
