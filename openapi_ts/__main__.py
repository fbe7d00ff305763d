"""Entry point: python -m openapi_ts INPUT -o OUTPUT

Reads an OpenAPI 2.x/3.x document and writes a TypeScript client into OUTPUT.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .codegen import generate
from .config import CLIENTS, ENUM_STYLES, load_config
from .errors import GenerationError
from .loader import load_document


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the generated client.")
@click.option("-c", "--client", default=None, type=click.Choice(CLIENTS), help="HTTP client flavour to generate.")
@click.option("--enums", default=None, type=click.Choice(ENUM_STYLES), help="How enums are emitted.")
@click.option("--operation-id/--no-operation-id", default=None, help="Name operations after their operationId.")
@click.option("--use-options/--no-use-options", default=None, help="Pass request parameters as one options object.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with generator options.")
@click.option("--debug", is_flag=True, help="Log resolution details.")
def main(input_path, output, client, enums, operation_id, use_options, config_path, debug):
    """Generate a TypeScript client from an OpenAPI document."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = load_config(config_path).with_overrides(
            client=client, enums=enums, operation_id=operation_id, use_options=use_options,
        )
        click.echo(f"Reading {input_path}...")
        document = load_document(input_path)
        written = generate(document, output, config)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Generated {len(written)} files in {output}")


if __name__ == "__main__":
    main()
