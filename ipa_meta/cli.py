"""Command-line interface for ipa-meta."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ipa_meta import __version__
from ipa_meta.config import Config, load_config, save_example_config
from ipa_meta.errors import IpaMetaError
from ipa_meta.extractor import extract_meta
from ipa_meta.fetch import ensure_ipa_meta, fetch_ipa
from ipa_meta.output.render import render_human, render_json


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"ipa-meta version {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def inspect(
    source: Optional[str] = typer.Argument(
        None,
        help="Path to an .ipa file or an http(s):// URL"
    ),
    key: Optional[str] = typer.Option(
        None,
        "--key",
        help="Object-storage key resolved against cdn_base_url from the config"
    ),
    json: bool = typer.Option(
        False,
        "--json",
        help="Output results in JSON format"
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        help="Write output to file instead of stdout"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to configuration file (default: ~/.ipa-meta.yaml)"
    ),
    generate_config: Optional[Path] = typer.Option(
        None,
        "--generate-config",
        help="Generate example configuration file at specified path and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log archive and plist parsing details to stderr"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """
    Show the bundle identifier, version and display name of an iOS app archive.

    Examples:
        ipa-meta MyApp.ipa                             # Human-readable summary
        ipa-meta MyApp.ipa --json                      # JSON output
        ipa-meta https://example.com/MyApp.ipa         # Download and inspect
        ipa-meta --key uploads/2024/MyApp.ipa          # Inspect from object storage
        ipa-meta MyApp.ipa --json --out meta.json      # Save JSON to a file
        ipa-meta --generate-config ~/.ipa-meta.yaml    # Create example config
    """
    _setup_logging(verbose)

    if generate_config:
        try:
            save_example_config(generate_config)
            print(f"✓ Example configuration saved to {generate_config}", file=sys.stderr)
            sys.exit(0)
        except OSError as e:
            print(f"Error generating config: {e}", file=sys.stderr)
            sys.exit(2)

    if (source is None) == (key is None):
        print("Error: Provide exactly one of SOURCE or --key", file=sys.stderr)
        sys.exit(2)

    # Load configuration
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        if config_file:
            sys.exit(2)
        print("Continuing with default settings...", file=sys.stderr)
        config = Config()

    # Read or download the archive, then extract
    try:
        if key is not None:
            label = key
            meta = ensure_ipa_meta(key, config)
            if meta is None:
                print("Error: --key is empty", file=sys.stderr)
                sys.exit(2)
        elif source.startswith(("http://", "https://")):
            label = source
            meta = extract_meta(fetch_ipa(source, timeout=config.fetch_timeout), config)
        else:
            path = Path(source).expanduser()
            label = str(path)
            if not path.is_file():
                print(f"Error: File not found: {path}", file=sys.stderr)
                sys.exit(2)
            meta = extract_meta(path.read_bytes(), config)
    except IpaMetaError as e:
        print(f"Extraction failed: {e}", file=sys.stderr)
        sys.exit(3)
    except OSError as e:
        print(f"Error reading archive: {e}", file=sys.stderr)
        sys.exit(2)

    output = render_json(meta, label) if json else render_human(meta, label)

    # Write output to file or stdout
    if out:
        if not out.parent.exists():
            print(f"Error: Directory does not exist: {out.parent}", file=sys.stderr)
            sys.exit(2)
        try:
            out.write_text(output)
        except OSError as e:
            print(f"Output failed: {e}", file=sys.stderr)
            sys.exit(3)
        print(f"✓ Metadata written to {out}", file=sys.stderr)
    else:
        print(output)

    sys.exit(0)


def main() -> None:
    """Entry point for the CLI."""
    typer.run(inspect)


if __name__ == "__main__":
    main()
