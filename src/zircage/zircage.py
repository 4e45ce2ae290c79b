#!/usr/bin/env python3

# Required core libraries
import csv
import numpy as np
from pathlib import Path
import time

# Batch mode libraries
from sklearn.model_selection import ParameterGrid

# Zircon age calculations
from .zircon import (
    ZirconAgeData,
    ZirconAgeError,
    calculate_selected_median_temp,
    compute_zircons_ttpath,
    select_tt_paths,
    zircon_age_pdf,
)

# Versioning
import importlib.metadata

__version__ = importlib.metadata.version("zircage")

# Seconds per year used in Tt-path files (365-day year)
SEC_PER_YR = 365.0 * 24.0 * 3600.0

# Model parameters that can be varied in batch mode
batch_keys = [
    "tsat",
    "tmin",
    "tsol",
    "tcal_max",
    "tcal_step",
    "max_x_zr",
    "zircon_number",
    "time_zr_growth",
    "bandwidth",
    "n_analyses",
]


# Unit conversions
def sec2yr(time: float) -> float:
    """Converts time from seconds to years."""
    return time / SEC_PER_YR


def yr2sec(time: float) -> float:
    """Converts time from years to seconds."""
    return time * SEC_PER_YR


def yr2myr(time: float) -> float:
    """Converts time from years to million years."""
    return time / 1.0e6


def myr2yr(time: float) -> float:
    """Converts time from million years to years."""
    return time * 1.0e6


def echo_model_info(time_years, tt_paths_temp, zircon_data):
    print("")
    print("--- General model information ---")
    print("")
    print(f"- Tt-paths: {tt_paths_temp.shape[1]}")
    print(
        f"- Time steps: {len(time_years)} @ {time_years[1] - time_years[0]:.1f} years each"
    )
    print(f"- Total time: {yr2myr(time_years[-1] - time_years[0]):.3f} million years")
    print(
        f"- Saturation range: {zircon_data.tmin:.1f} - {zircon_data.tsat:.1f} °C "
        f"(solidus {zircon_data.tsol:.1f} °C)"
    )
    print(
        f"- Minimum zircon growth time: {yr2myr(zircon_data.time_zr_growth):.3f} million years"
    )


def echo_zircon_ages(number_zircons, ages_eruptible, prob, time_ma_average, pdf_zircon_average):
    ages_ma = yr2myr(ages_eruptible.max() - ages_eruptible)
    print("")
    print("--- Zircon age summary ---")
    print("")
    print(f"- Selected Tt-paths: {number_zircons.shape[1]}")
    print(f"- Total number of zircons: {number_zircons.sum():.0f}")
    print(f"- Most probable zircon age: {ages_ma[np.argmax(prob)]:.3f} Ma")
    print(
        f"- Peak of average age PDF: {time_ma_average[np.argmax(pdf_zircon_average)]:.3f} Ma"
    )
    print(
        f"- Mean zircon age: {np.sum(prob * ages_ma):.3f} Ma"
    )


def read_tt_paths_file(file):
    """
    Read in Tt-paths from a comma-delimited text file.

    The first column contains the time in seconds, all other columns the
    temperature (°C) of one Tt-path.

    Parameters
    ----------
    file : Path object or string
        Path of the Tt-path file.

    Returns
    -------
    time_years : numpy.ndarray
        Time of every row in years.
    tt_paths_temp : numpy.ndarray
        Array of size (nt, npaths) with the temperature of every path.
    """
    tt_paths = np.loadtxt(file, delimiter=",", ndmin=2)
    if tt_paths.shape[1] < 2:
        raise ValueError(
            "Tt-path file should contain a time column and at least one temperature column."
        )
    if tt_paths.shape[0] < 2:
        raise ValueError("Tt-path file should contain at least two time steps.")

    time_years = sec2yr(tt_paths[:, 0])
    tt_paths_temp = tt_paths[:, 1:]

    return time_years, tt_paths_temp


def init_params(
    echo_inputs=False,
    echo_info=True,
    echo_ages=True,
    debug=False,
    tt_file="",
    tsat=825.0,
    tmin=690.0,
    tsol=690.0,
    tcal_max=800.0,
    tcal_step=1.0,
    max_x_zr=0.001,
    zircon_number=100,
    time_zr_growth=0.7e6,
    bandwidth=1.0e5,
    n_analyses=300,
    seed=None,
    n_workers=1,
    write_output=False,
    log_output=False,
    log_file="",
    model_id="",
):
    """
    Define the model parameters.

    Parameters
    ----------
    echo_inputs : bool, default=False
        Print input values to the screen.
    echo_info : bool, default=True
        Print basic model info to the screen.
    echo_ages : bool, default=True
        Print the zircon age summary to the screen.
    debug : bool, default=False
        Enable debug output.
    tt_file : str, default=""
        Comma-delimited Tt-path file (time in seconds, then one temperature column per path).
    tsat : float or int, default=825.0
        Maximum zircon saturation temperature in °C.
    tmin : float or int, default=690.0
        Minimum zircon saturation temperature in °C.
    tsol : float or int, default=690.0
        Solidus temperature in °C.
    tcal_max : float or int, default=800.0
        Maximum temperature used to calculate the zircon fraction in °C.
    tcal_step : float or int, default=1.0
        Temperature step of the zircon saturation curve in °C.
    max_x_zr : float, default=0.001
        Maximum zircon fraction at the solidus.
    zircon_number : int, default=100
        Number of zircons used to scale the zircon saturation curve.
    time_zr_growth : float or int, default=0.7e6
        Minimum time within the zircon saturation range in years.
    bandwidth : float or int, default=1.0e5
        Kernel bandwidth of the zircon age PDFs in years.
    n_analyses : int, default=300
        Number of synthetic zircon analyses per age PDF.
    seed : int, default=None
        Seed for the random number generator used in the age PDFs.
    n_workers : int, default=1
        Number of threads used to count zircons.
    write_output : bool, default=False
        Write zircon ages, age PDF and temperature statistics to csv files.
    log_output : bool, default=False
        Write model summary info to a csv file.
    log_file : str, default=""
        CSV file for log output.
    model_id : str, default=""
        Model identification character string.

    Returns
    -------
    params : dict
        Dictionary of model parameters.
    """
    params = {
        "cmd_line_call": False,
        "echo_inputs": echo_inputs,
        "echo_info": echo_info,
        "echo_ages": echo_ages,
        "debug": debug,
        "tt_file": tt_file,
        "tsat": tsat,
        "tmin": tmin,
        "tsol": tsol,
        "tcal_max": tcal_max,
        "tcal_step": tcal_step,
        "max_x_zr": max_x_zr,
        "zircon_number": zircon_number,
        "time_zr_growth": time_zr_growth,
        "bandwidth": bandwidth,
        "n_analyses": n_analyses,
        "seed": seed,
        "n_workers": n_workers,
        "write_output": write_output,
        "log_output": log_output,
        "log_file": log_file,
        "model_id": model_id,
        "batch_mode": False,
    }

    return params


def create_output_directory(wd, dir=""):
    """Creates a new directory in working directory."""
    newdir = wd / dir
    newdir.mkdir(parents=True, exist_ok=True)
    return newdir


def prep_model(params):
    """Prepares models to be run as single models or in batch mode.

    Parameters
    ----------
    params : dict
        Dictionary of model parameter values.

    Returns
    -------
    results : dict or tuple
        Results of run_model() for a single model, or the number of succeeded
        and failed models in batch mode.
    """
    # Define working directory path
    wd = Path.cwd()

    # Create needed output directories
    if params["log_output"] or params["write_output"]:
        create_output_directory(wd, dir="csv")

    # Announce version before proceeding
    print("")
    print(f"{25 * '='} This is zircage version {__version__} {25 * '='}\n")

    # Create empty dictionary for batch model parameters, if any
    batch_params = {}

    # Values from the command line are always lists, function calls may mix scalars and lists
    params["batch_mode"] = False
    for key in batch_keys:
        if isinstance(params[key], list):
            if len(params[key]) != 1:
                params["batch_mode"] = True
            batch_params[key] = params[key]
        elif params["cmd_line_call"]:
            raise ValueError(f"Command line value for {key} should be a list.")

    if params["echo_inputs"]:
        print("--- Model inputs ---\n")
        for key, value in params.items():
            print(f"- {key}: {value}")
        print("")

    if not params["batch_mode"]:
        # Convert list values, run single model
        for key in batch_params:
            params[key] = params[key][0]
        return run_model(params)
    else:
        create_output_directory(wd, dir="csv")
        return batch_run(params, batch_params)


def run_model(params):
    """
    Calculates zircon ages and age PDFs for the Tt-paths in params["tt_file"].

    Parameters
    ----------
    params : dict
        Dictionary of model parameter values.

    Returns
    -------
    results : dict
        Dictionary with the time axis, zircon age probabilities, number of
        zircons, temperature statistics and age PDFs.
    """
    # Say hello
    if not params["batch_mode"]:
        print(f"{23 * '-'} Zircon age calculation started {24 * '-'}")
        exec_start = time.time()

    # Set flags if using batch mode
    if params["batch_mode"]:
        params["echo_info"] = False
        params["echo_ages"] = False

    # Define working directory
    wd = Path.cwd()

    if params["tt_file"] == "":
        raise ValueError("No Tt-path file defined. Set tt_file to the input file path.")

    zircon_data = ZirconAgeData.from_params(params)
    time_years, tt_paths_temp = read_tt_paths_file(params["tt_file"])

    if params["echo_info"]:
        echo_model_info(time_years, tt_paths_temp, zircon_data)

    if params["debug"]:
        dt = time_years[1] - time_years[0]
        id_col_er, id_col_selected, length_trace, id_min_time, min_step_n, max_age_spread = (
            select_tt_paths(tt_paths_temp, dt, zircon_data)
        )
        print("")
        print("--- Tt-path selection ---")
        print("")
        print(f"- Eligible Tt-paths: {len(id_col_er)}")
        print(f"- Selected Tt-paths: {len(id_col_selected)}")
        print(f"- Longest time in saturation range: {max_age_spread:.1f} years")
        print(f"- Minimum number of time steps in saturation range: {min_step_n:.0f}")
        print(f"- Reference time index: {id_min_time}")

    # Calculate the probability that a zircon of a certain age is sampled
    prob, ages_eruptible, number_zircons, temp_av_time, temp_sd_time = compute_zircons_ttpath(
        time_years, tt_paths_temp, zircon_data=zircon_data, n_workers=params["n_workers"]
    )

    # Use this to calculate PDF curves
    time_ma, pdf_zircons, time_ma_average, pdf_zircon_average = zircon_age_pdf(
        ages_eruptible,
        number_zircons,
        bandwidth=params["bandwidth"],
        n_analyses=params["n_analyses"],
        rng=params["seed"],
    )

    if params["echo_ages"]:
        echo_zircon_ages(
            number_zircons, ages_eruptible, prob, time_ma_average, pdf_zircon_average
        )

    results = {
        "time_years": time_years,
        "prob": prob,
        "ages_eruptible": ages_eruptible,
        "number_zircons": number_zircons,
        "temp_av_time": temp_av_time,
        "temp_sd_time": temp_sd_time,
        "time_ma": time_ma,
        "pdf_zircons": pdf_zircons,
        "time_ma_average": time_ma_average,
        "pdf_zircon_average": pdf_zircon_average,
    }

    if params["write_output"]:
        prefix = f"{params['model_id']}_" if params["model_id"] != "" else ""
        outdir = create_output_directory(wd, dir="csv")
        write_zircon_ages(
            outdir / f"{prefix}zircon_ages.csv", ages_eruptible, prob, number_zircons
        )
        write_age_pdf(
            outdir / f"{prefix}zircon_age_pdf.csv", time_ma_average, pdf_zircon_average
        )
        write_temperature_stats(
            outdir / f"{prefix}temperature_stats.csv", time_years, temp_av_time, temp_sd_time
        )
        time_years_slct, temp_median_slct = calculate_selected_median_temp(
            time_years, tt_paths_temp, zircon_data
        )
        write_temperature_stats(
            outdir / f"{prefix}selected_median_temperature.csv",
            time_years_slct,
            temp_median_slct,
        )

    if params["log_output"]:
        log_output(params, results=results, batch_mode=params["batch_mode"])

    if not params["batch_mode"]:
        exec_end = time.time()
        print(
            f"\n{10 * '-'} Execution completed in {exec_end - exec_start:10.4f} seconds {10 * '-'}"
        )

    return results


def write_zircon_ages(outfile, ages_eruptible, prob, number_zircons):
    """Writes zircon ages, their probability and number of zircons to a file."""
    ages_ma = yr2myr(ages_eruptible.max() - ages_eruptible)
    n_measurable_ages = number_zircons.sum(axis=1)
    with open(outfile, "w") as csvfile:
        writer = csv.writer(csvfile, delimiter=",", lineterminator="\n")
        writer.writerow(["Age (Ma)", "Probability", "Number of zircons"])
        for i in range(len(ages_ma)):
            writer.writerow([ages_ma[i], prob[i], n_measurable_ages[i]])


def write_age_pdf(outfile, time_ma_average, pdf_zircon_average):
    """Writes the average zircon age PDF to a file."""
    with open(outfile, "w") as csvfile:
        writer = csv.writer(csvfile, delimiter=",", lineterminator="\n")
        writer.writerow(["Age (Ma)", "Probability density"])
        for age, density in zip(time_ma_average, pdf_zircon_average):
            writer.writerow([age, density])


def write_temperature_stats(outfile, time_years, temp_av_time, temp_sd_time=None):
    """Writes temperature statistics of the Tt-paths to a file."""
    with open(outfile, "w") as csvfile:
        writer = csv.writer(csvfile, delimiter=",", lineterminator="\n")
        if temp_sd_time is None:
            writer.writerow(["Time (yr)", "Temperature (C)"])
            for i in range(len(time_years)):
                writer.writerow([time_years[i], temp_av_time[i]])
        else:
            writer.writerow(
                ["Time (yr)", "Mean temperature (C)", "Temperature standard deviation (C)"]
            )
            for i in range(len(time_years)):
                writer.writerow([time_years[i], temp_av_time[i], temp_sd_time[i]])


def log_output(params, results=None, batch_mode=False):
    """Writes model summary output to a csv file"""
    # Define working directory path
    wd = Path.cwd()

    # Define log file name if undefined
    if params["log_file"] == "":
        if batch_mode:
            params["log_file"] = "zircage_batch_log.csv"
        else:
            params["log_file"] = "zircage_run_log.csv"

    # Create output file path
    outfile = create_output_directory(wd, dir="csv") / params["log_file"]

    # Check number of past models and write header if needed
    model_count = 0
    try:
        with open(outfile) as f:
            infile = f.readlines()
            write_header = len(infile) < 1
            if not write_header:
                model_count = len(infile) - 1
    except FileNotFoundError:
        write_header = True

    # Define model id if using batch mode
    if batch_mode:
        model_count += 1
        params["model_id"] = f"M{str(model_count).zfill(4)}"

    with open(outfile, "a+") as f:
        if write_header:
            f.write(
                "Model ID,Saturation temperature (C),Minimum saturation temperature (C),"
                "Solidus temperature (C),Maximum calculation temperature (C),"
                "Calculation temperature step (C),Maximum zircon fraction,Zircon number,"
                "Zircon growth time (yr),Bandwidth (yr),Number of analyses,"
                "Selected Tt-paths,Total number of zircons,Most probable zircon age (Ma),"
                "Peak of average age PDF (Ma)\n"
            )
        f.write(
            f"{params['model_id']},{params['tsat']:.4f},{params['tmin']:.4f},{params['tsol']:.4f},"
            f"{params['tcal_max']:.4f},{params['tcal_step']:.4f},{params['max_x_zr']:.6f},"
            f"{params['zircon_number']},{params['time_zr_growth']:.4f},{params['bandwidth']:.4f},"
            f"{params['n_analyses']},"
        )
        if results is None:
            f.write(",,,\n")
        else:
            ages_eruptible = results["ages_eruptible"]
            ages_ma = yr2myr(ages_eruptible.max() - ages_eruptible)
            peak_age = results["time_ma_average"][np.argmax(results["pdf_zircon_average"])]
            f.write(
                f"{results['number_zircons'].shape[1]},{results['number_zircons'].sum():.1f},"
                f"{ages_ma[np.argmax(results['prob'])]:.6f},{peak_age:.6f}\n"
            )

    return outfile


def batch_run(params, batch_params):
    """Runs zircage in batch mode"""
    # Make parameter permutation list
    param_list = list(ParameterGrid(batch_params))

    print(
        f"{19 * '-'} Starting batch processor for {len(param_list):4} models {19 * '-'}\n"
    )
    exec_start = time.time()

    # Initialize counters
    success = 0
    failed = 0

    # Loop over list of parameters and run all permutations
    for i in range(len(param_list)):
        model = param_list[i]
        print(f"Iteration {i + 1}...", end="", flush=True)
        # Update model parameters
        for key in batch_params:
            params[key] = model[key]

        try:
            run_model(params)
            print("Complete")
            success += 1
        except (ZirconAgeError, ValueError) as err:
            print("FAILED!")
            if params["log_output"]:
                log_output(params, results=None, batch_mode=True)
            if params["debug"]:
                print(f"  {err}")
            failed += 1

    exec_end = time.time()
    print(
        f"\n{3 * '-'} Execution completed in {exec_end - exec_start:10.4f} seconds ({success:4} succeeded, {failed:4} failed) {4 * '-'}"
    )

    return success, failed
