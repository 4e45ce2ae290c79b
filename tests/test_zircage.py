import numpy as np
import pytest
import zircage
from zircage.zircage_cli import main


@pytest.fixture
def tt_file(tmp_path, time_years, tt_paths_temp):
    """Tt-path file with time in seconds followed by the path temperatures."""
    file = tmp_path / "tt_paths.csv"
    np.savetxt(file, np.column_stack([zircage.yr2sec(time_years), tt_paths_temp]), delimiter=",")
    return file


class TestConversions:
    def test_sec2yr(self):
        assert zircage.sec2yr(time=31536000.0) == 1.0

    def test_yr2sec(self):
        assert zircage.yr2sec(time=2.0) == 63072000.0

    def test_yr2myr(self):
        assert zircage.yr2myr(time=2.5e6) == 2.5

    def test_myr2yr(self):
        assert zircage.myr2yr(time=0.7) == pytest.approx(0.7e6)


class TestInitParams:
    def test_defaults(self):
        params = zircage.init_params()
        assert params["cmd_line_call"] is False
        assert params["batch_mode"] is False
        assert params["tsat"] == 825.0
        assert params["tmin"] == 690.0
        assert params["tsol"] == 690.0
        assert params["tcal_max"] == 800.0
        assert params["max_x_zr"] == 0.001
        assert params["zircon_number"] == 100
        assert params["time_zr_growth"] == 0.7e6
        assert params["bandwidth"] == 1.0e5
        assert params["n_analyses"] == 300
        assert params["tt_file"] == ""

    def test_zircon_data_from_params(self):
        params = zircage.init_params(tsat=830.0, time_zr_growth=0.5e6)
        zircon_data = zircage.ZirconAgeData.from_params(params)
        assert zircon_data.tsat == 830.0
        assert zircon_data.time_zr_growth == 0.5e6
        assert zircon_data.tmin == 690.0


class TestReadTtPathsFile:
    def test_read(self, tt_file, time_years, tt_paths_temp):
        time_read, temps_read = zircage.read_tt_paths_file(tt_file)
        assert time_read == pytest.approx(time_years)
        assert np.array_equal(temps_read, tt_paths_temp)

    def test_missing_temperatures(self, tmp_path):
        file = tmp_path / "time_only.csv"
        np.savetxt(file, np.arange(5.0), delimiter=",")
        with pytest.raises(ValueError):
            zircage.read_tt_paths_file(file)

    def test_single_time_step(self, tmp_path):
        file = tmp_path / "one_row.csv"
        np.savetxt(file, np.array([[0.0, 800.0, 750.0]]), delimiter=",")
        with pytest.raises(ValueError):
            zircage.read_tt_paths_file(file)


class TestRunModel:
    def test_no_tt_file(self):
        params = zircage.init_params(echo_info=False, echo_ages=False)
        with pytest.raises(ValueError):
            zircage.run_model(params)

    def test_results(self, tt_file):
        params = zircage.init_params(tt_file=str(tt_file), seed=5, n_analyses=100)
        results = zircage.run_model(params)
        assert results["number_zircons"].shape == (201, 2)
        assert results["prob"].sum() == pytest.approx(1.0)
        assert len(results["pdf_zircons"]) == 2
        assert len(results["time_ma_average"]) == len(results["pdf_zircon_average"])
        assert len(results["temp_av_time"]) == len(results["time_years"])

    def test_threads(self, tt_file):
        params = zircage.init_params(tt_file=str(tt_file), seed=5, n_analyses=100)
        serial = zircage.run_model(dict(params))
        params["n_workers"] = 3
        threaded = zircage.run_model(params)
        assert np.array_equal(serial["number_zircons"], threaded["number_zircons"])
        assert np.array_equal(serial["pdf_zircon_average"], threaded["pdf_zircon_average"])

    def test_write_output(self, tt_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        params = zircage.init_params(
            tt_file=str(tt_file),
            seed=1,
            n_analyses=100,
            write_output=True,
            log_output=True,
            model_id="test",
        )
        zircage.run_model(params)
        csv_dir = tmp_path / "csv"
        for name in [
            "test_zircon_ages.csv",
            "test_zircon_age_pdf.csv",
            "test_temperature_stats.csv",
            "test_selected_median_temperature.csv",
        ]:
            assert (csv_dir / name).exists()

        ages = np.loadtxt(csv_dir / "test_zircon_ages.csv", delimiter=",", skiprows=1)
        assert ages.shape == (201, 3)
        assert ages[:, 1].sum() == pytest.approx(1.0)

        log_lines = (csv_dir / "zircage_run_log.csv").read_text().splitlines()
        assert len(log_lines) == 2
        assert log_lines[1].startswith("test,825.0000")


class TestPrepModel:
    def test_single_model(self, tt_file):
        params = zircage.init_params(tt_file=str(tt_file), seed=2, n_analyses=100)
        results = zircage.prep_model(params)
        assert params["batch_mode"] is False
        assert "pdf_zircon_average" in results

    def test_single_item_lists(self, tt_file):
        params = zircage.init_params(
            tt_file=str(tt_file), tsat=[825.0], time_zr_growth=[0.7e6], seed=2, n_analyses=100
        )
        results = zircage.prep_model(params)
        assert params["tsat"] == 825.0
        assert results["number_zircons"].shape[1] == 2

    def test_batch_mode(self, tt_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        params = zircage.init_params(
            tt_file=str(tt_file),
            time_zr_growth=[0.5e6, 1.5e6],
            seed=3,
            n_analyses=100,
            log_output=True,
        )
        success, failed = zircage.prep_model(params)
        assert success == 1
        assert failed == 1

        log_lines = (tmp_path / "csv" / "zircage_batch_log.csv").read_text().splitlines()
        assert len(log_lines) == 3
        assert log_lines[1].startswith("M0001")
        assert log_lines[2].startswith("M0002")
        assert log_lines[2].endswith(",,,")

    def test_batch_invalid_parameter(self, tt_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        params = zircage.init_params(
            tt_file=str(tt_file), tcal_step=[0.0, 1.0], seed=3, n_analyses=50
        )
        success, failed = zircage.prep_model(params)
        assert success == 1
        assert failed == 1

    def test_cmd_line_scalars(self, tt_file):
        params = zircage.init_params(tt_file=str(tt_file))
        params["cmd_line_call"] = True
        with pytest.raises(ValueError):
            zircage.prep_model(params)


class TestCommandLine:
    def test_no_arguments(self):
        with pytest.raises(SystemExit):
            main([])

    def test_run(self, tt_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        main(
            [
                "--tt-file",
                str(tt_file),
                "--seed",
                "4",
                "--n-analyses",
                "100",
                "--write-output",
            ]
        )
        assert (tmp_path / "csv" / "zircon_ages.csv").exists()

    def test_batch(self, tt_file, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        main(
            [
                "--tt-file",
                str(tt_file),
                "--time-zr-growth",
                "0.5e6",
                "0.6e6",
                "--n-analyses",
                "50",
            ]
        )
        captured = capsys.readouterr()
        assert "2 succeeded" in captured.out
