"""Render compiled files and the HTTP runtime, then write them out.

Everything is rendered in memory before the first write, so a failure
anywhere leaves the output directory untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import jinja2

from .client_builder import parse_document
from .config import Config
from .emitter import compile_client
from .models import Client
from .nodes import OutputFile
from .printer import (
    print_comment,
    print_expression,
    print_import,
    print_import_name,
    print_member,
    print_parameter,
    print_type,
    print_value,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

CORE_FILES = (
    "ApiError.ts",
    "ApiRequestOptions.ts",
    "ApiResult.ts",
    "CancelablePromise.ts",
    "OpenAPI.ts",
    "request.ts",
)


def create_environment() -> jinja2.Environment:
    """Template environment with the TypeScript printing filters registered."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters.update(
        ts_comment=print_comment,
        ts_expression=print_expression,
        ts_import=print_import,
        ts_import_name=print_import_name,
        ts_member=print_member,
        ts_parameter=print_parameter,
        ts_type=print_type,
        ts_value=print_value,
    )
    return env


def render_file(file: OutputFile, env: jinja2.Environment | None = None) -> str:
    """Render one compiled file to TypeScript source."""
    env = env or create_environment()
    return env.get_template("file.ts.j2").render(file=file)


def render_core(
    client: Client, config: Config, env: jinja2.Environment | None = None,
) -> dict[str, str]:
    """Render the runtime files for the configured client flavour, keyed by file name."""
    env = env or create_environment()
    context: dict[str, Any] = {
        "client": config.client,
        "server": client.server,
        "version": client.version,
    }
    rendered = {}
    for name in CORE_FILES:
        # angular returns Observables, never CancelablePromise
        if name == "CancelablePromise.ts" and config.client == "angular":
            continue
        rendered[name] = env.get_template(f"core/{name}.j2").render(**context)
    return rendered


def render_client(
    client: Client, files: dict[str, OutputFile], config: Config,
) -> dict[str, str]:
    """Render every output, keyed by path relative to the output directory."""
    env = create_environment()
    rendered: dict[str, str] = {}
    if config.export_core:
        for name, text in render_core(client, config, env).items():
            rendered[f"core/{name}"] = text
    for file in files.values():
        if file.is_empty():
            continue
        rendered[file.get_name()] = render_file(file, env)
    return rendered


def write_files(rendered: dict[str, str], output_dir: Path) -> list[Path]:
    written = []
    for relative, text in rendered.items():
        path = output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        logger.info("Wrote %s", path)
        written.append(path)
    return written


def generate(document: dict[str, Any], output_dir: Path, config: Config) -> list[Path]:
    """Parse, compile, render and write one document; returns the written paths."""
    client = parse_document(document, config)
    files = compile_client(document, client, config)
    rendered = render_client(client, files, config)
    return write_files(rendered, Path(output_dir))
