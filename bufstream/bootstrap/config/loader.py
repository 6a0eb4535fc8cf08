import argparse
import os
from pathlib import Path

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser(prog: str, description: str, with_config: bool = True) -> argparse.ArgumentParser:
    """
    Argument parser carrying the options shared by every bufstream tool.
    Tools that read no settings pass `with_config=False`.
    """
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawTextHelpFormatter
    )

    if with_config:
        parser.add_argument(
            "-c", "--config",
            type=str,
            help=(
                "Path to a bufstream configuration file (YAML).\n"
                "Defaults to $BUFSTREAMCONFIG, then ./bufstream.yaml if present."
            )
        )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=LOG_LEVELS,
        help=(
            "Logging verbosity, written to stderr.\n"
            "DEBUG    → stream lifecycle transitions.\n"
            "WARNING  → only warnings and errors (default)."
        ),
    )

    return parser


def get_configfile(raw: str | None = None) -> Path | None:
    """
    Resolve the configuration file to load.

    Priority: explicit path (CLI) > BUFSTREAMCONFIG > ./bufstream.yaml.
    An explicitly requested file must exist; the default one is optional.
    """
    raw = raw or os.getenv("BUFSTREAMCONFIG")

    if raw is None:
        file = Path.cwd() / "bufstream.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the BUFSTREAMCONFIG environment variable\n"
            "  - Or place a 'bufstream.yaml' file in the current working directory."
        )

    return file
