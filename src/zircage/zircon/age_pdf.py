# Import needed libraries
import warnings

import numpy as np
from sklearn.neighbors import KernelDensity

from .zircon_ages import compute_zircons_ttpath_vecs
from .zircon_data import PathSelectionError


def kernel_density(samples, bandwidth, npoints=2048):
    """
    Calculates a Gaussian kernel density estimate on a regular grid.

    The grid extends four bandwidths beyond the smallest and largest samples.

    Parameters
    ----------
    samples : numpy.ndarray
        Sample values.
    bandwidth : float
        Kernel bandwidth in the units of the samples.
    npoints : int, default=2048
        Number of grid points.

    Returns
    -------
    x : numpy.ndarray
        Grid points.
    density : numpy.ndarray
        Estimated density at the grid points.
    """
    if bandwidth <= 0.0:
        raise ValueError(f"Kernel bandwidth must be positive, got {bandwidth}.")
    samples = np.asarray(samples, dtype=float).reshape(-1, 1)
    x = np.linspace(samples.min() - 4.0 * bandwidth, samples.max() + 4.0 * bandwidth, npoints)
    kde = KernelDensity(kernel="gaussian", bandwidth=bandwidth).fit(samples)
    density = np.exp(kde.score_samples(x.reshape(-1, 1)))
    return x, density


def _sample_age_pdf(ages_ma, px, bandwidth_ma, n_analyses, rng):
    """Draws weighted age samples and returns their kernel density estimate."""
    smp = rng.choice(ages_ma, size=n_analyses, replace=True, p=px)
    return kernel_density(smp, bandwidth_ma)


def zircon_age_pdf(
    ages_eruptible, number_zircons, bandwidth=1.0e5, n_analyses=300, rng=None
):
    """
    Calculates probability density functions for zircon ages.

    For every selected Tt-path, n_analyses synthetic zircon analyses are drawn
    from the ages weighted by the number of zircons of that age, and the
    density of these ages is estimated with a Gaussian kernel. The same is done
    for the ensemble of all paths to get an average curve.

    Parameters
    ----------
    ages_eruptible : numpy.ndarray
        Age of eruptible magma in years, as returned by compute_zircons_ttpath().
    number_zircons : numpy.ndarray
        Array of size (nt, nselected) with the number of zircons of every path.
    bandwidth : float, default=1.0e5
        Smoothing window of the curves in years.
    n_analyses : int, default=300
        Number of synthetic zircon analyses.
    rng : numpy.random.Generator or int, optional
        Random number generator, or seed for a new generator.

    Returns
    -------
    time_ma : list of numpy.ndarray
        Age axis of every path curve in Ma.
    pdf_zircons : list of numpy.ndarray
        Density curve of every path.
    time_ma_average : numpy.ndarray
        Age axis of the average curve in Ma.
    pdf_zircon_average : numpy.ndarray
        Density curve of all paths combined.
    """
    rng = np.random.default_rng(rng)
    ages_eruptible = np.asarray(ages_eruptible, dtype=float)
    number_zircons = np.asarray(number_zircons, dtype=float)
    ages_ma = (ages_eruptible.max() - ages_eruptible) / 1.0e6
    bandwidth_ma = bandwidth / 1.0e6

    n_measurable_ages = number_zircons.sum(axis=1)
    if n_measurable_ages.sum() <= 0.0:
        raise PathSelectionError("The selected Tt-paths contain no measurable zircons.")

    # Calculate PDF for each of the zircon Tt-paths
    pdf_zircons = []
    time_ma = []
    for i in range(number_zircons.shape[1]):
        n_meas = number_zircons[:, i]
        n_total = n_meas.sum()
        if n_total <= 0.0:
            warnings.warn(
                f"Tt-path {i} has no measurable zircons and is skipped in the age PDF.",
                stacklevel=2,
            )
            continue
        x, density = _sample_age_pdf(ages_ma, n_meas / n_total, bandwidth_ma, n_analyses, rng)
        pdf_zircons.append(density)
        time_ma.append(x)

    px_av = n_measurable_ages / n_measurable_ages.sum()
    time_ma_average, pdf_zircon_average = _sample_age_pdf(
        ages_ma, px_av, bandwidth_ma, n_analyses, rng
    )

    return time_ma, pdf_zircons, time_ma_average, pdf_zircon_average


def compute_zircon_age_pdf(
    time_years_vecs,
    tt_paths_temp_vecs,
    zircon_data=None,
    bandwidth=1.0e5,
    n_analyses=300,
    rng=None,
    n_workers=1,
):
    """
    Calculates zircon age PDFs from Tt-paths given as vectors of variable length.

    Returns
    -------
    tuple
        The outputs of zircon_age_pdf() (time_ma, pdf_zircons, time_ma_average,
        pdf_zircon_average) followed by those of compute_zircons_ttpath_vecs()
        (time_years, prob, ages_eruptible, number_zircons, temp_av_time,
        temp_sd_time).
    """
    # Probability that a zircon of a certain age is sampled
    (
        time_years,
        prob,
        ages_eruptible,
        number_zircons,
        temp_av_time,
        temp_sd_time,
    ) = compute_zircons_ttpath_vecs(
        time_years_vecs, tt_paths_temp_vecs, zircon_data=zircon_data, n_workers=n_workers
    )

    time_ma, pdf_zircons, time_ma_average, pdf_zircon_average = zircon_age_pdf(
        ages_eruptible,
        number_zircons,
        bandwidth=bandwidth,
        n_analyses=n_analyses,
        rng=rng,
    )

    return (
        time_ma,
        pdf_zircons,
        time_ma_average,
        pdf_zircon_average,
        time_years,
        prob,
        ages_eruptible,
        number_zircons,
        temp_av_time,
        temp_sd_time,
    )
