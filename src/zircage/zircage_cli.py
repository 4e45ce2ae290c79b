#!/usr/bin/env python3

# Import libraries we need
import argparse
import sys
import zircage


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Calculates zircon age distributions from magmatic temperature-time paths",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    general = parser.add_argument_group(
        "General options", "Options for various general features"
    )
    general.add_argument(
        "--echo-inputs",
        dest="echo_inputs",
        help="Print input values to the screen",
        action="store_true",
        default=False,
    )
    general.add_argument(
        "--no-echo-info",
        dest="no_echo_info",
        help="Do not print basic model info to the screen",
        action="store_true",
        default=False,
    )
    general.add_argument(
        "--no-echo-ages",
        dest="no_echo_ages",
        help="Do not print the zircon age summary to the screen",
        action="store_true",
        default=False,
    )
    general.add_argument(
        "--debug",
        help="Enable debug output",
        action="store_true",
        default=False,
    )
    general.add_argument(
        "--n-workers",
        dest="n_workers",
        help="Number of threads used to count zircons",
        default=1,
        type=int,
    )
    inputs = parser.add_argument_group("Input options", "Options for the Tt-path input")
    inputs.add_argument(
        "--tt-file",
        dest="tt_file",
        help="Comma-delimited Tt-path file (time in seconds, one temperature column per path)",
        default="",
        type=str,
    )
    saturation = parser.add_argument_group(
        "Zircon saturation options", "Options for the zircon saturation model"
    )
    saturation.add_argument(
        "--tsat",
        help="Maximum zircon saturation temperature (°C)",
        nargs="+",
        default=[825.0],
        type=float,
    )
    saturation.add_argument(
        "--tmin",
        help="Minimum zircon saturation temperature (°C)",
        nargs="+",
        default=[690.0],
        type=float,
    )
    saturation.add_argument(
        "--tsol",
        help="Solidus temperature (°C)",
        nargs="+",
        default=[690.0],
        type=float,
    )
    saturation.add_argument(
        "--tcal-max",
        dest="tcal_max",
        help="Maximum temperature used to calculate the zircon fraction (°C)",
        nargs="+",
        default=[800.0],
        type=float,
    )
    saturation.add_argument(
        "--tcal-step",
        dest="tcal_step",
        help="Temperature step of the zircon saturation curve (°C)",
        nargs="+",
        default=[1.0],
        type=float,
    )
    saturation.add_argument(
        "--max-x-zr",
        dest="max_x_zr",
        help="Maximum zircon fraction at the solidus",
        nargs="+",
        default=[0.001],
        type=float,
    )
    saturation.add_argument(
        "--zircon-number",
        dest="zircon_number",
        help="Number of zircons used to scale the zircon saturation curve",
        nargs="+",
        default=[100],
        type=int,
    )
    saturation.add_argument(
        "--time-zr-growth",
        dest="time_zr_growth",
        help="Minimum time within the zircon saturation range (years)",
        nargs="+",
        default=[0.7e6],
        type=float,
    )
    pdf = parser.add_argument_group(
        "Age PDF options", "Options for the zircon age probability density functions"
    )
    pdf.add_argument(
        "--bandwidth",
        help="Kernel bandwidth of the age PDFs (years)",
        nargs="+",
        default=[1.0e5],
        type=float,
    )
    pdf.add_argument(
        "--n-analyses",
        dest="n_analyses",
        help="Number of synthetic zircon analyses",
        nargs="+",
        default=[300],
        type=int,
    )
    pdf.add_argument(
        "--seed",
        help="Seed for the random number generator",
        default=None,
        type=int,
    )
    output = parser.add_argument_group(
        "Output options", "Options for saving output to files"
    )
    output.add_argument(
        "--write-output",
        dest="write_output",
        help="Write zircon ages, age PDF and temperature statistics to csv files",
        action="store_true",
        default=False,
    )
    output.add_argument(
        "--log-output",
        dest="log_output",
        help="Write model summary info to a csv file",
        action="store_true",
        default=False,
    )
    output.add_argument(
        "--log-file",
        dest="log_file",
        help="CSV filename for log output",
        default="",
    )
    output.add_argument(
        "--model-id",
        dest="model_id",
        help="Model identification character string",
        default="",
    )

    # Display help and exit if no flags are set
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) == 0:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(argv)

    params = {
        "cmd_line_call": True,
        "echo_inputs": args.echo_inputs,
        "echo_info": not args.no_echo_info,
        "echo_ages": not args.no_echo_ages,
        "debug": args.debug,
        "tt_file": args.tt_file,
        "tsat": args.tsat,
        "tmin": args.tmin,
        "tsol": args.tsol,
        "tcal_max": args.tcal_max,
        "tcal_step": args.tcal_step,
        "max_x_zr": args.max_x_zr,
        "zircon_number": args.zircon_number,
        "time_zr_growth": args.time_zr_growth,
        "bandwidth": args.bandwidth,
        "n_analyses": args.n_analyses,
        "seed": args.seed,
        "n_workers": args.n_workers,
        "write_output": args.write_output,
        "log_output": args.log_output,
        "log_file": args.log_file,
        "model_id": args.model_id,
        "batch_mode": False,
    }

    zircage.prep_model(params)


if __name__ == "__main__":
    # execute only if run as a script
    main()
