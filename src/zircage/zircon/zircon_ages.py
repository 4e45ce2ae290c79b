"""
Zircon ages from temperature-time paths

Description:
    Converts an ensemble of temperature-time (Tt) paths of a magmatic system
    into the number of zircons crystallized at every time step, selects the
    paths that spend long enough within the zircon saturation range and
    computes the probability that a zircon of a given age is sampled.

    The method follows the R routine provided as electronic supplement to
    Weber et al. (2020). The minimum time needed to grow zircons is expressed
    directly as time_zr_growth, the minimum time a path has to remain within
    the saturation range.

References:

    Weber, G., Caricchi, L., Arce, J.L., Schmitt, A.K., 2020. Determining the
          current size and state of subvolcanic magma reservoirs. Nat Commun 11,
          5477. https://doi.org/10.1038/s41467-020-19084-2

    Tierney, C. R., Schmitt, A. K., Lovera, O. M. and de Silva, S. L., 2016.
          Voluminous plutonism during volcanic quiescence revealed by thermochemical
          modeling of zircon. Geology, 44, 683-686.
"""

import warnings

import numpy as np

from .saturation import compute_number_zircons
from .zircon_data import PathSelectionError, RaggedInputError, ZirconAgeData


class TtPath:
    """Time and temperature values of a single Tt-path."""

    def __init__(self, time, temperature):
        self.time = np.asarray(time, dtype=float)
        self.temperature = np.asarray(temperature, dtype=float)
        if self.time.ndim != 1 or self.temperature.ndim != 1:
            raise RaggedInputError("Tt-path time and temperature must be one-dimensional.")
        if len(self.time) != len(self.temperature):
            raise RaggedInputError(
                f"Tt-path has {len(self.time)} time values but {len(self.temperature)} temperatures."
            )
        if len(self.time) == 0:
            raise RaggedInputError("Tt-path is empty.")

    def __len__(self):
        return len(self.time)


def calculate_temperature_stats(tt_paths_temp):
    """
    Calculates the mean and standard deviation of temperature at every time step.

    Samples equal to zero (or not finite) belong to paths that are not active
    at that time and are ignored. Rows without active samples have a NaN mean,
    rows with fewer than two active samples a NaN standard deviation.

    Parameters
    ----------
    tt_paths_temp : numpy.ndarray
        Array of size (nt, npaths) with the temperature of every path.

    Returns
    -------
    temp_av_time : numpy.ndarray
        Mean temperature of the active paths at every time step.
    temp_sd_time : numpy.ndarray
        Sample standard deviation of the active path temperatures.
    """
    active = np.isfinite(tt_paths_temp) & (tt_paths_temp != 0.0)
    temps = np.where(active, tt_paths_temp, 0.0)
    n_active = active.sum(axis=1)

    temp_av_time = np.full(temps.shape[0], np.nan)
    has_active = n_active > 0
    temp_av_time[has_active] = temps[has_active].sum(axis=1) / n_active[has_active]

    temp_sd_time = np.full(temps.shape[0], np.nan)
    has_spread = n_active > 1
    deviation = np.where(active, temps - temp_av_time[:, None], 0.0)
    temp_sd_time[has_spread] = np.sqrt(
        (deviation[has_spread] ** 2).sum(axis=1) / (n_active[has_spread] - 1)
    )

    return temp_av_time, temp_sd_time


def select_tt_paths(tt_paths_temp, dt, zircon_data=None):
    """
    Selects the Tt-paths that can produce measurable zircons.

    Eligible paths exceed tmin at some point and are below tsat at the final
    time step (their zircons are crystallized). Of those, paths that remain
    within (tmin, tsat) for more than min_step_n time steps are selected.

    Parameters
    ----------
    tt_paths_temp : numpy.ndarray
        Array of size (nt, npaths) with the temperature of every path in °C.
    dt : float
        Time step in years.
    zircon_data : ZirconAgeData, optional
        Zircon age calculation parameters. Defaults are used if None.

    Returns
    -------
    id_col_er : numpy.ndarray
        Column indices of the eligible paths.
    id_col_selected : numpy.ndarray
        Column indices of the selected paths.
    length_trace : numpy.ndarray
        Number of time steps within (tmin, tsat) for every eligible path.
    id_min_time : int
        Position of the minimum temperature among the below-tsat samples of the
        path with the longest trace.
    min_step_n : float
        Minimum number of time steps needed within the saturation range.
    max_age_spread : float
        Longest time spent by an eligible path within the saturation range in years.
    """
    if zircon_data is None:
        zircon_data = ZirconAgeData()
    tmin = zircon_data.tmin
    tsat = zircon_data.tsat
    time_zr_growth = zircon_data.time_zr_growth

    # Paths through the saturation range that are still below tsat at the end
    id_col_er = np.flatnonzero(
        (tt_paths_temp.max(axis=0) > tmin) & (tt_paths_temp[-1, :] < tsat)
    )
    if len(id_col_er) == 0:
        raise PathSelectionError(
            f"No Tt-path exceeds tmin ({tmin} °C) and ends below tsat ({tsat} °C).",
            longest_trace=0.0,
            time_zr_growth=time_zr_growth,
        )

    paths_er = tt_paths_temp[:, id_col_er]
    length_trace = ((paths_er > tmin) & (paths_er < tsat)).sum(axis=0).astype(float)

    id_col_lgst_tr = id_col_er[np.argmax(length_trace)]
    temp_lgst_tr = tt_paths_temp[:, id_col_lgst_tr]
    id_min_time = int(np.argmin(temp_lgst_tr[temp_lgst_tr < tsat]))

    max_age_spread = length_trace.max() * dt
    if max_age_spread <= 0.0:
        raise PathSelectionError(
            f"No Tt-path spends any time between tmin ({tmin} °C) and tsat ({tsat} °C).",
            longest_trace=0.0,
            time_zr_growth=time_zr_growth,
        )

    # Same as time_zr_growth / dt, kept in this form as it sets the selection threshold
    min_step_n = np.floor((time_zr_growth / max_age_spread) * (max_age_spread / dt))

    id_col_selected = id_col_er[length_trace > min_step_n]
    if len(id_col_selected) == 0:
        raise PathSelectionError(
            f"No Tt-path is sufficiently long within the saturation range for "
            f"time_zr_growth = {time_zr_growth} yrs. The longest Tt-path spends "
            f"{max_age_spread} years there. Decrease time_zr_growth, e.g. "
            f"ZirconAgeData(time_zr_growth=0.1e6), and rerun.",
            longest_trace=max_age_spread,
            time_zr_growth=time_zr_growth,
        )

    return id_col_er, id_col_selected, length_trace, id_min_time, min_step_n, max_age_spread


def clean_inactive_prefix(tt_paths_temp, id_col_er):
    """Zeroes eligible paths up to their last inactive (zero) time step."""
    tt_paths_clean = np.where(np.isfinite(tt_paths_temp), tt_paths_temp, 0.0)
    for col in id_col_er:
        ind = np.flatnonzero(tt_paths_clean[:, col] == 0.0)
        if len(ind) > 0:
            tt_paths_clean[: ind[-1] + 1, col] = 0.0
    return tt_paths_clean


def assemble_zircon_ages(tt_paths_clean, n_zr, id_col_selected, dt):
    """
    Calculates the zircon age probability of the selected Tt-paths.

    Parameters
    ----------
    tt_paths_clean : numpy.ndarray
        Array of size (nt, npaths) with temperatures, zero where a path is inactive.
    n_zr : numpy.ndarray
        Array of size (nt, npaths) with the number of zircons.
    id_col_selected : numpy.ndarray
        Column indices of the selected paths.
    dt : float
        Time step in years.

    Returns
    -------
    prob : numpy.ndarray
        Relative probability that a zircon with a given age is sampled.
    ages_eruptible : numpy.ndarray
        Age of eruptible magma in years.
    number_zircons : numpy.ndarray
        Array of size (nt, nselected) with the number of zircons of the selected paths.
    """
    zr_select = (tt_paths_clean > 0.0).astype(float)
    number_zircons = (zr_select * n_zr)[:, id_col_selected]
    n_measurable_ages = number_zircons.sum(axis=1)

    total = n_measurable_ages.sum()
    if total == 0.0:
        raise PathSelectionError("The selected Tt-paths contain no measurable zircons.")

    # Probability that a zircon is sampled depends on how many of a given age are available
    prob = n_measurable_ages / total
    ages_eruptible = dt * np.arange(1, number_zircons.shape[0] + 1, dtype=float)

    return prob, ages_eruptible, number_zircons


def _time_step(time_years):
    """Returns the time step of a time vector, warns if it is not uniform."""
    time_years = np.asarray(time_years, dtype=float)
    if len(time_years) < 2:
        raise ValueError("At least two time values are needed to define a time step.")
    steps = np.diff(time_years)
    dt = steps[0]
    if dt <= 0.0:
        raise ValueError(f"Time values must increase, got a first time step of {dt}.")
    if not np.allclose(steps, dt, rtol=1.0e-6, atol=0.0):
        warnings.warn(
            f"Time step is not uniform, using the first time step ({dt} yrs).",
            stacklevel=3,
        )
    return dt


def compute_zircons_ttpath(time_years, tt_paths_temp, zircon_data=None, n_workers=1):
    """
    Calculates the number of zircons produced by a series of Tt-paths.

    Parameters
    ----------
    time_years : numpy.ndarray
        Vector of length nt with the time in years since the beginning of the simulation.
    tt_paths_temp : numpy.ndarray
        Array of size (nt, npaths) with the temperature of every path in °C.
    zircon_data : ZirconAgeData, optional
        Zircon age calculation parameters. Defaults are used if None.
    n_workers : int, default=1
        Number of threads used to count zircons.

    Returns
    -------
    prob : numpy.ndarray
        Relative probability that a zircon with a given age exists.
    ages_eruptible : numpy.ndarray
        Age of eruptible magma in years.
    number_zircons : numpy.ndarray
        Array of size (nt, nselected) with the number of zircons of the selected paths.
    temp_av_time : numpy.ndarray
        Vector of length nt with the average temperature of the paths.
    temp_sd_time : numpy.ndarray
        Vector of length nt with the standard deviation of the path temperatures.
    """
    if zircon_data is None:
        zircon_data = ZirconAgeData()
    tt_paths_temp = np.asarray(tt_paths_temp, dtype=float)
    if tt_paths_temp.ndim != 2 or tt_paths_temp.shape[0] != len(time_years):
        raise ValueError(
            "Tt-path temperatures must be an array of size (nt, npaths) with nt = len(time_years)."
        )
    dt = _time_step(time_years)

    n_zr = compute_number_zircons(tt_paths_temp, zircon_data, n_workers=n_workers)
    id_col_er, id_col_selected, _, _, _, _ = select_tt_paths(tt_paths_temp, dt, zircon_data)
    temp_av_time, temp_sd_time = calculate_temperature_stats(tt_paths_temp)

    tt_paths_clean = clean_inactive_prefix(tt_paths_temp, id_col_er)
    prob, ages_eruptible, number_zircons = assemble_zircon_ages(
        tt_paths_clean, n_zr, id_col_selected, dt
    )

    return prob, ages_eruptible, number_zircons, temp_av_time, temp_sd_time


def calculate_selected_median_temp(time_years, tt_paths_temp, zircon_data=None):
    """
    Calculates the median temperature of the selected paths within the saturation range.

    The time window starts at the reference index of the longest trace and ends
    min_step_n time steps before the end of the simulation (last step excluded).

    Returns
    -------
    time_years_slct : numpy.ndarray
        Time in years of the steps in the window.
    temp_median_slct : numpy.ndarray
        Median temperature of the selected paths within (tmin, tsat), NaN where
        no selected path is within that range.
    """
    if zircon_data is None:
        zircon_data = ZirconAgeData()
    time_years = np.asarray(time_years, dtype=float)
    tt_paths_temp = np.asarray(tt_paths_temp, dtype=float)
    dt = _time_step(time_years)
    _, id_col_selected, _, id_min_time, min_step_n, _ = select_tt_paths(
        tt_paths_temp, dt, zircon_data
    )

    # Rows counted from one, as in the time_years / dt bookkeeping
    last_row = np.floor(time_years.max() / dt - min_step_n)
    rows = np.arange(id_min_time + 1, last_row + 1)[:-1].astype(int) - 1
    rows = rows[(rows >= 0) & (rows < tt_paths_temp.shape[0])]

    temp_median_slct = np.full(len(rows), np.nan)
    for i, row in enumerate(rows):
        temps = tt_paths_temp[row, id_col_selected]
        temps = temps[(temps > zircon_data.tmin) & (temps < zircon_data.tsat)]
        if len(temps) > 0:
            temp_median_slct[i] = np.median(temps)

    return time_years[rows], temp_median_slct


def compute_zircons_convert_vecs2mat(time_years_vecs, tt_paths_temp_vecs):
    """
    Converts Tt-paths of variable length into a single time vector and temperature matrix.

    Parameters
    ----------
    time_years_vecs : sequence of array_like
        Time in years of every Tt-path.
    tt_paths_temp_vecs : sequence of array_like
        Temperature in °C of every Tt-path.

    Returns
    -------
    time_years : numpy.ndarray
        Sorted distinct time values of all paths.
    tt_paths_mat : numpy.ndarray
        Array of size (len(time_years), npaths), zero where a path is not defined.
    """
    if len(time_years_vecs) != len(tt_paths_temp_vecs):
        raise RaggedInputError(
            f"Got {len(time_years_vecs)} time vectors but {len(tt_paths_temp_vecs)} temperature vectors."
        )
    if len(time_years_vecs) == 0:
        raise RaggedInputError("No Tt-paths given.")
    paths = [TtPath(t, temp) for t, temp in zip(time_years_vecs, tt_paths_temp_vecs)]

    time_years = np.unique(np.concatenate([path.time for path in paths]))

    tt_paths_mat = np.zeros((len(time_years), len(paths)))
    for i, path in enumerate(paths):
        istart = int(np.searchsorted(time_years, path.time[0]))
        iend = istart + len(path)
        if iend > len(time_years) or not np.array_equal(time_years[istart:iend], path.time):
            raise RaggedInputError(
                f"Time values of Tt-path {i} are not a contiguous part of the common time axis."
            )
        tt_paths_mat[istart:iend, i] = path.temperature

    return time_years, tt_paths_mat


def compute_zircons_ttpath_vecs(
    time_years_vecs, tt_paths_temp_vecs, zircon_data=None, n_workers=1
):
    """
    Calculates the number of zircons for Tt-paths given as vectors of variable length.

    Returns the combined time vector followed by the outputs of compute_zircons_ttpath().
    """
    time_years, tt_paths_temp = compute_zircons_convert_vecs2mat(
        time_years_vecs, tt_paths_temp_vecs
    )
    prob, ages_eruptible, number_zircons, temp_av_time, temp_sd_time = compute_zircons_ttpath(
        time_years, tt_paths_temp, zircon_data=zircon_data, n_workers=n_workers
    )

    return time_years, prob, ages_eruptible, number_zircons, temp_av_time, temp_sd_time
