"""Serve inspection API command."""

from __future__ import annotations

import argparse
import logging

from profilekit.commands.common import CommandRuntime, build_installer

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace, *, runtime: CommandRuntime) -> int:
    installer = build_installer(args, runtime=runtime)

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - dependency/runtime
        raise RuntimeError("Missing optional UI dependencies. Install with: pip install 'profilekit[ui]'") from exc

    from profilekit.webapp import create_app

    app = create_app(installer)
    logger.info("Starting inspection API on http://%s:%s (profile=%s)", args.host, args.port, args.profile)
    uvicorn.run(app, host=args.host, port=args.port, reload=False, log_level=args.log_level.lower())
    return 0
