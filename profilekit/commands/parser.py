"""CLI parser construction."""

from __future__ import annotations

import argparse

from profilekit.commands.common import add_common_config_flags, add_profile_flag
from profilekit.hooks import HookName


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="profilekit install profile composer")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument(
        "--dispatch-log-level",
        help="Separate logging level for hook dispatch tracing (e.g. DEBUG)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", aliases=["graph"], help="Resolve a base profile's included profiles and dependencies")
    resolve.add_argument("--output-dir", help="Write profile_graph.json and profile_report.md here instead of printing")
    resolve.add_argument(
        "--with-hooks",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Include the hook implementation catalog",
    )
    add_profile_flag(resolve)
    add_common_config_flags(resolve)

    hooks = sub.add_parser("hooks", aliases=["catalog"], help="List hook implementations found across the profile graph")
    hooks.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    add_profile_flag(hooks)
    add_common_config_flags(hooks)

    dispatch = sub.add_parser("dispatch", help="Dispatch one hook and print the resulting payload")
    dispatch.add_argument(
        "--hook",
        required=True,
        choices=[hook.value for hook in HookName] + [hook.suffix for hook in HookName],
        help="Hook name (full name or suffix)",
    )
    dispatch.add_argument("--context", help="JSON or YAML file with the lifecycle context")
    dispatch.add_argument("--payload", help="JSON or YAML file with the initial payload")
    add_profile_flag(dispatch)
    add_common_config_flags(dispatch)

    serve = sub.add_parser("serve", aliases=["serve-ui"], help="Run the inspection API over a resolved profile")
    serve.add_argument("--host", default="127.0.0.1", help="Bind host")
    serve.add_argument("--port", type=int, default=8766, help="Bind port")
    add_profile_flag(serve)
    add_common_config_flags(serve)

    return parser
