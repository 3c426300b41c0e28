#!/usr/bin/env python3
"""Command-line entry point of the detector QA process."""

import argparse
import sys
from typing import List

from detqa.config import load_config, parse_value, set_nested_value
from detqa.version import __version__


def main(
    config: str,
    source: List[str],
    source_list: str,
    output: str,
    n: int,
    nskip: int,
    entry_list: str,
    skip_entry_list: str,
    log_dir: str,
    config_overrides: List[str],
):
    """Main driver for the QA process.

    Performs these basic functions:
    - Update the configuration with the command-line arguments
    - Run the event loop

    Parameters
    ----------
    config : str
        Path to the configuration file
    source : List[str]
        List of paths to the input files
    source_list : str
        Path to a text file containing a list of data file paths
    output : str
        Path to the QA output file
    n : int
        Number of entries to process
    nskip : int
        Number of entries to skip
    entry_list : str
        Path to a text file containing a list of entries to process
    skip_entry_list : str
        Path to a text file containing a list of entries to skip
    log_dir : str
        Path to the directory for storing the logs
    config_overrides : List[str]
        List of config overrides in the form "key.path=value"
    """
    cfg = load_config(config)

    # If there is no base block, build one
    if cfg.get("base", None) is None:
        cfg["base"] = {}

    # The configuration must minimally contain an IO block with a reader
    if "io" not in cfg or cfg["io"].get("reader", None) is None:
        raise KeyError("Configuration file must contain an `io.reader` block.")

    # Override the input command-line information into the configuration
    io_mapping = {
        "file_keys": source if source is not None else source_list,
        "n_entry": n,
        "n_skip": nskip,
        "entry_list": entry_list,
        "skip_entry_list": skip_entry_list,
    }
    for io_key, io_value in io_mapping.items():
        if io_value is not None:
            cfg["io"]["reader"][io_key] = io_value

    # Override the QA output path and the log directory if provided
    if output is not None:
        cfg["io"]["output"] = output

    if log_dir is not None:
        cfg["base"]["log_dir"] = log_dir

    # Apply any generic config overrides from --set arguments
    if config_overrides:
        for override in config_overrides:
            if "=" not in override:
                raise ValueError(
                    f"Invalid --set format: '{override}'. "
                    f"Expected format: 'key.path=value'"
                )

            key_path, value_str = override.split("=", 1)
            value = parse_value(value_str.strip())
            cfg = set_nested_value(cfg, key_path.strip(), value)

    # Import the driver only once the configuration is validated
    from detqa.main import run

    run(cfg)


def cli(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="detqa - Detector PID quality assurance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  detqa -c config.yaml -s events.h5                   Run the QA on one file
  detqa -c config.yaml -S file_list.txt -o qa.h5      Run on a list of files
  detqa -c config.yaml --set qa.trd_pid.min_ntracklets=5
""",
    )

    parser.add_argument(
        "--version", "-v", action="version", version=f"detqa {__version__}"
    )

    parser.add_argument(
        "-c", "--config", required=True, help="Path to the configuration file"
    )

    # Add mutually exclusive group for source input
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-s", "--source", nargs="+", type=str, help="List of paths to the input files"
    )
    group.add_argument(
        "-S",
        "--source-list",
        help="Path to a text file containing a list of data file paths",
    )

    parser.add_argument("-o", "--output", help="Path to the QA output file")

    parser.add_argument("-n", "--iterations", type=int, help="Number of entries to run")

    parser.add_argument("--nskip", type=int, help="Number of entries to skip")

    parser.add_argument(
        "--entry-list",
        help="Path to a text file containing a list of entries to process",
    )

    parser.add_argument(
        "--skip-entry-list",
        help="Path to a text file containing a list of entries to skip",
    )

    parser.add_argument("--log-dir", help="Path to the directory for storing the logs")

    parser.add_argument(
        "--set",
        action="append",
        dest="config_overrides",
        metavar="KEY=VALUE",
        help="Override any config parameter using dot notation "
        "(e.g., --set qa.trd_pid.min_ntracklets=5). "
        "Can be used multiple times for multiple overrides.",
    )

    args = parser.parse_args(argv)

    main(
        config=args.config,
        source=args.source,
        source_list=args.source_list,
        output=args.output,
        n=args.iterations,
        nskip=args.nskip,
        entry_list=args.entry_list,
        skip_entry_list=args.skip_entry_list,
        log_dir=args.log_dir,
        config_overrides=args.config_overrides,
    )


if __name__ == "__main__":
    cli(sys.argv[1:])
