import numpy as np
import pytest
from scipy.integrate import trapezoid
from zircage.zircon import (
    PathSelectionError,
    compute_zircon_age_pdf,
    compute_zircons_ttpath,
    kernel_density,
    zircon_age_pdf,
)


@pytest.fixture
def zircon_ages(time_years, tt_paths_temp):
    prob, ages_eruptible, number_zircons, _, _ = compute_zircons_ttpath(
        time_years, tt_paths_temp
    )
    return ages_eruptible, number_zircons


class TestKernelDensity:
    def test_grid(self):
        x, density = kernel_density(np.array([1.0, 2.0, 3.0]), 0.5)
        assert len(x) == len(density) == 2048
        assert x[0] == pytest.approx(-1.0)
        assert x[-1] == pytest.approx(5.0)
        assert trapezoid(density, x) == pytest.approx(1.0, abs=1.0e-3)

    def test_peak_at_sample(self):
        x, density = kernel_density(np.array([2.0]), 0.1, npoints=801)
        assert x[np.argmax(density)] == pytest.approx(2.0)

    def test_bad_bandwidth(self):
        with pytest.raises(ValueError):
            kernel_density(np.array([1.0, 2.0]), 0.0)


class TestZirconAgePdf:
    def test_outputs(self, zircon_ages):
        ages_eruptible, number_zircons = zircon_ages
        time_ma, pdf_zircons, time_ma_average, pdf_zircon_average = zircon_age_pdf(
            ages_eruptible, number_zircons, rng=42
        )
        assert len(time_ma) == len(pdf_zircons) == number_zircons.shape[1]
        for x, density in zip(time_ma, pdf_zircons):
            assert len(x) == len(density)
            assert np.all(density >= 0.0)
            assert trapezoid(density, x) == pytest.approx(1.0, abs=1.0e-2)
        assert np.all(pdf_zircon_average >= 0.0)
        assert trapezoid(pdf_zircon_average, time_ma_average) == pytest.approx(1.0, abs=1.0e-2)

    def test_ages_in_ma(self, zircon_ages):
        ages_eruptible, number_zircons = zircon_ages
        _, _, time_ma_average, _ = zircon_age_pdf(ages_eruptible, number_zircons, rng=0)
        # Ages are measured back from the end of the run, within four bandwidths
        span_ma = (ages_eruptible.max() - ages_eruptible.min()) / 1.0e6
        assert time_ma_average.min() >= -0.4 - 1.0e-9
        assert time_ma_average.max() <= span_ma + 0.4 + 1.0e-9

    def test_seed_reproducible(self, zircon_ages):
        ages_eruptible, number_zircons = zircon_ages
        first = zircon_age_pdf(ages_eruptible, number_zircons, rng=7)
        second = zircon_age_pdf(ages_eruptible, number_zircons, rng=7)
        assert np.array_equal(first[2], second[2])
        assert np.array_equal(first[3], second[3])
        for a, b in zip(first[1], second[1]):
            assert np.array_equal(a, b)

    def test_generator_accepted(self, zircon_ages):
        ages_eruptible, number_zircons = zircon_ages
        rng = np.random.default_rng(3)
        time_ma, _, _, _ = zircon_age_pdf(ages_eruptible, number_zircons, rng=rng)
        assert len(time_ma) == 2

    def test_zero_column_skipped(self):
        ages_eruptible = np.arange(1, 11) * 1.0e4
        number_zircons = np.zeros((10, 2))
        number_zircons[3:7, 0] = 5.0
        with pytest.warns(UserWarning, match="no measurable zircons"):
            time_ma, pdf_zircons, _, pdf_zircon_average = zircon_age_pdf(
                ages_eruptible, number_zircons, bandwidth=2.0e4, n_analyses=50, rng=1
            )
        assert len(time_ma) == len(pdf_zircons) == 1
        assert np.all(pdf_zircon_average >= 0.0)


    def test_no_zircons(self):
        ages_eruptible = np.arange(1, 11) * 1.0e4
        with pytest.raises(PathSelectionError):
            zircon_age_pdf(ages_eruptible, np.zeros((10, 2)), bandwidth=2.0e4, rng=1)
        with pytest.raises(PathSelectionError):
            zircon_age_pdf(ages_eruptible, np.zeros((10, 0)), bandwidth=2.0e4, rng=1)


class TestComputeZirconAgePdf:
    def test_vectors(self, time_years, tt_paths_temp):
        time_vecs = [time_years for _ in range(tt_paths_temp.shape[1])]
        temp_vecs = [tt_paths_temp[:, i] for i in range(tt_paths_temp.shape[1])]
        results = compute_zircon_age_pdf(time_vecs, temp_vecs, rng=11, n_analyses=100)
        assert len(results) == 10
        time_ma, pdf_zircons, time_ma_average, pdf_zircon_average = results[:4]
        time_years_out, prob, ages_eruptible, number_zircons, temp_av, temp_sd = results[4:]
        assert np.array_equal(time_years_out, time_years)
        assert prob.sum() == pytest.approx(1.0)
        assert len(pdf_zircons) == number_zircons.shape[1]
        assert len(time_ma_average) == len(pdf_zircon_average)
        assert len(temp_av) == len(temp_sd) == len(time_years)
