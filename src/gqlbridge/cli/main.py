#!/usr/bin/env python3
"""
gqlbridge CLI - Main entry point.

Usage:
    gqlbridge init                          # Write a default gqlbridge.yaml
    gqlbridge serve                         # Run the language server
    gqlbridge transform <file> --env relay  # Show the transformed buffer
    gqlbridge tokens <file> --env relay     # Print reverse-mapped tokens
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..core.types import ENVIRONMENTS, dump
from ..toolchain import tokenize
from ..transform import reverse_map, transform
from .config import CONFIG_FILE_NAME, ServiceConfig, load_config

logger = logging.getLogger(__name__)


def _resolve_config(args: argparse.Namespace) -> ServiceConfig:
    """Config file, then GQLBRIDGE_* variables, then command line flags."""
    config = load_config(args.config) or ServiceConfig()
    config.apply_env()
    for name in ("host", "port", "project_dir", "default_env", "log_level"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(config, name, value.upper() if name == "log_level" else value)
    return config


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _read_buffer(file_name: str) -> str:
    if file_name == "-":
        return sys.stdin.read()
    return Path(file_name).read_text(encoding="utf-8")


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    config_path = Path(args.config)

    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists. Use --force to overwrite.")
        return 1

    config = ServiceConfig(project_dir=args.project_dir, default_env=args.default_env or "plain")
    config.save(config_path)
    print(f"Created {config_path}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the language server with uvicorn."""
    import uvicorn

    from ..server import LanguageServer

    config = _resolve_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}")
        return 1

    _configure_logging(config.log_level)
    server = LanguageServer(
        project_dir=config.project_dir,
        default_env=config.default_env,
        cors_origins=config.cors_origins,
        schema_timeout=config.schema_timeout,
    )
    logger.info(f"Starting language service on http://{config.host}:{config.port}")
    uvicorn.run(server.app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def cmd_transform(args: argparse.Namespace) -> int:
    """Print the transformed buffer and the recorded insertions."""
    _configure_logging(args.log_level or "WARNING")
    try:
        buffer = _read_buffer(args.file)
    except OSError as e:
        print(f"Error: {e}")
        return 1

    forward = transform("getTokens", buffer, environment=args.env)
    context = forward.context
    print(forward.transformed_buffer)
    print(json.dumps({
        "shifts": [{"position": shift.position, "length": shift.length} for shift in context.shifts],
        "templates": {str(position): text for position, text in context.template_by_position.items()},
    }, indent=2))
    return 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Print reverse-mapped tokens as JSON."""
    _configure_logging(args.log_level or "WARNING")
    try:
        buffer = _read_buffer(args.file)
    except OSError as e:
        print(f"Error: {e}")
        return 1

    forward = transform("getTokens", buffer, environment=args.env)
    tokens = reverse_map("getTokens", tokenize(forward.transformed_buffer), forward.context)
    print(json.dumps({"tokens": dump(tokens)}, indent=2))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="gqlbridge",
        description="gqlbridge - GraphQL language service for tagged templates"
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--config", "-c", default=CONFIG_FILE_NAME, help="Config file path")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Write a default config file")
    init_parser.add_argument("--project-dir", dest="project_dir", help="Project directory with graphql.config.json")
    init_parser.add_argument("--default-env", dest="default_env", choices=ENVIRONMENTS, help="Default environment")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing config")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the language server")
    serve_parser.add_argument("--host", help="Bind host")
    serve_parser.add_argument("--port", "-p", type=int, help="Bind port")
    serve_parser.add_argument("--project-dir", dest="project_dir", help="Project directory with graphql.config.json")
    serve_parser.add_argument("--default-env", dest="default_env", choices=ENVIRONMENTS, help="Default environment")

    # transform
    transform_parser = subparsers.add_parser("transform", help="Show the transformed buffer of a file")
    transform_parser.add_argument("file", help="GraphQL file ('-' for stdin)")
    transform_parser.add_argument("--env", "-e", default="relay", choices=ENVIRONMENTS, help="Environment")

    # tokens
    tokens_parser = subparsers.add_parser("tokens", help="Print reverse-mapped tokens of a file")
    tokens_parser.add_argument("file", help="GraphQL file ('-' for stdin)")
    tokens_parser.add_argument("--env", "-e", default="relay", choices=ENVIRONMENTS, help="Environment")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "serve": cmd_serve,
        "transform": cmd_transform,
        "tokens": cmd_tokens,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
