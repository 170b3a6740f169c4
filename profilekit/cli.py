"""CLI entrypoint for resolving and dispatching install profiles."""

from __future__ import annotations

import logging

from profilekit.commands import dispatch, hooks, resolve, serve
from profilekit.commands.common import normalize_command
from profilekit.commands.parser import build_parser
from profilekit.discovery import FilesystemDeclarationSource
from profilekit.errors import ProfileKitError
from profilekit.loader import FileCodeLoader
from profilekit.logging_utils import configure_logging
from profilekit.services.command_runtime import CommandRuntime

logger = logging.getLogger(__name__)

COMMANDS = {
    "resolve": resolve.run,
    "hooks": hooks.run,
    "dispatch": dispatch.run,
    "serve": serve.run,
}


def default_runtime() -> CommandRuntime:
    return CommandRuntime(
        declaration_source_cls=FilesystemDeclarationSource,
        code_loader_cls=FileCodeLoader,
    )


def main(argv: list[str] | None = None, *, runtime: CommandRuntime | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, dispatch_level=args.dispatch_log_level)

    command = COMMANDS.get(normalize_command(args.command))
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args, runtime=runtime or default_runtime())
    except ProfileKitError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
