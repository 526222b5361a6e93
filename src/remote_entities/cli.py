"""
CLI commands for calling remote methods and inspecting entity types.
"""

import argparse
import importlib
import logging
import sys
import xml.etree.ElementTree as ET

import httpx

from .client import get_client
from .errors import RemoteEntitiesError
from .registry import entity_types_in


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def parse_params(pairs):
    """Turn ``key=value`` arguments into a parameter mapping."""
    params = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Expected key=value, got {pair!r}")
        key, value = pair.split("=", 1)
        params[key] = value
    return params


def cmd_call(args):
    """Perform a single remote call and print the response document."""
    setup_logging(args.verbose)

    try:
        params = parse_params(args.params)
        response = get_client().call(args.method, params)
    except (ValueError, RemoteEntitiesError, httpx.HTTPError) as e:
        print(f"✗ {args.method} failed: {e}")
        return 1

    body = response.body
    ET.indent(body)
    print(ET.tostring(body, encoding="unicode"))
    return 0


def cmd_describe(args):
    """List the entity types declared in a module."""
    setup_logging(args.verbose)

    try:
        importlib.import_module(args.module)
    except ImportError as e:
        print(f"✗ Cannot import {args.module}: {e}")
        return 1

    entity_types = entity_types_in(args.module)
    if not entity_types:
        print(f"✗ No entity types declared in {args.module}")
        return 1

    for entity_type in entity_types:
        schema = entity_type.schema()
        print(f"{schema.type_name}")
        for attribute in schema.attributes:
            print(f"  ○ {attribute.name} <- {attribute.source_path}")
        for finder in schema.finders.values():
            print(f"  ✓ {finder.name}() -> {finder.call} ({finder.kind})")
        for association in schema.associations.values():
            print(f"  ✓ {association.name}() -> {association.target}.{association.finder}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Remote entity mapping CLI",
        prog="remote-entities"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # Call command
    call_parser = subparsers.add_parser(
        "call",
        help="Call a remote method with the environment-configured client"
    )
    call_parser.add_argument("method", help="Remote method name, e.g. people.getInfo")
    call_parser.add_argument(
        "params",
        nargs="*",
        help="Method arguments as key=value pairs"
    )
    call_parser.set_defaults(func=cmd_call)

    # Describe command
    describe_parser = subparsers.add_parser(
        "describe",
        help="List entity types declared in a module"
    )
    describe_parser.add_argument("module", help="Dotted module path to import")
    describe_parser.set_defaults(func=cmd_describe)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
