"""
Export the slash command catalog as JSON for the docs frontend.

Example:
  python -m apps.maintenance.export_commands --output apps/docs_site/static/commands.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

from apps.docs_site.config import COMMANDS_JSON_PATH
from apps.leetcode_bot.commands.catalog import get_commands

DEFAULT_OUTPUT = COMMANDS_JSON_PATH


def export_commands(output: Path, include_hidden: bool = True) -> List[Dict[str, Any]]:
    commands = get_commands(include_hidden=include_hidden)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(commands, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return commands


def main() -> None:
    parser = argparse.ArgumentParser(description="Export slash command metadata to JSON")
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Output file (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--public-only",
        action="store_true",
        help="Leave out hidden (owner) commands",
    )
    args = parser.parse_args()

    commands = export_commands(args.output, include_hidden=not args.public_only)
    print(f"Exported {len(commands)} commands to {args.output}")


if __name__ == "__main__":
    main()
