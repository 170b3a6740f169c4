"""Hook catalog listing command."""

from __future__ import annotations

import argparse
import json

from profilekit.commands.common import CommandRuntime, build_installer


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    installer = build_installer(args, runtime=runtime)
    catalog = installer.catalog

    if args.json:
        print(json.dumps({"root": installer.root, "hooks": catalog.as_dict()}, indent=2))
        return 0

    print(f"Profile: {installer.root}")
    print("Profiles: " + ", ".join(installer.graph.extensions))
    for hook in catalog.hooks:
        found = catalog.implementations_for(hook)
        names = ", ".join(item.function for item in found) or "-"
        print(f"{hook.value}: {names}")
    return 0
