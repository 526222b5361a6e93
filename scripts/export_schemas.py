#!/usr/bin/env python
"""Export entity schemas declared in a module as JSON.

Usage:
    python scripts/export_schemas.py myclient.objects --out-dir build/schemas

Outputs:
    <module>.json    One schema per declared entity type (attributes, finders,
                     associations)
"""
from __future__ import annotations

import argparse
import importlib
import json
from pathlib import Path

from remote_entities.registry import entity_types_in


def export_module(module: str, out_dir: Path) -> Path:
    importlib.import_module(module)
    schemas = [entity_type.schema().to_dict() for entity_type in entity_types_in(module)]
    path = out_dir / f"{module}.json"
    path.write_text(json.dumps(schemas, indent=2))
    return path


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("module", help="Dotted module path declaring entity types")
    parser.add_argument("--out-dir", default="build/schemas", help="Output directory")
    args = parser.parse_args()

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    path = export_module(args.module, out_dir)

    print(f"Exported entity schemas -> {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
