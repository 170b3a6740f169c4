"""Single hook dispatch command."""

from __future__ import annotations

import argparse
import json
import logging

from profilekit.commands.common import CommandRuntime, build_installer, load_data_file
from profilekit.hooks import coerce_hook

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    installer = build_installer(args, runtime=runtime)
    hook = coerce_hook(args.hook)
    context = load_data_file(args.context)
    payload = load_data_file(args.payload)

    result = installer.engine.dispatch(hook, context, payload)
    print(json.dumps(result.model_dump(mode="json"), indent=2))

    if result.failures:
        logger.error("%s implementation(s) of %s failed", len(result.failures), hook.value)
        return 1
    return 0
