"""Resolve command."""

from __future__ import annotations

import argparse
import json
import logging

from profilekit.commands.common import CommandRuntime, build_installer
from profilekit.reporting import graph_payload, write_report_bundle

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    installer = build_installer(args, runtime=runtime)
    graph = installer.graph
    catalog = installer.catalog if args.with_hooks else None

    if args.output_dir:
        paths = write_report_bundle(graph, args.output_dir, catalog=catalog)
        logger.info("Wrote %s and %s", paths["json"], paths["markdown"])
        return 0

    print(json.dumps(graph_payload(graph, catalog), indent=2))
    return 0
