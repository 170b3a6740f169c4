"""Report generation for resolved profile graphs."""

from __future__ import annotations

import json
from pathlib import Path

from profilekit.catalog import HookCatalog
from profilekit.models import ExtensionGraph


def graph_payload(graph: ExtensionGraph, catalog: HookCatalog | None = None) -> dict:
    payload: dict = {
        "root": graph.root,
        "profiles": list(graph.extensions),
        "dependencies": list(graph.dependencies),
        "removals": list(graph.removals),
        "declarations": {
            name: descriptor.model_dump(mode="json", exclude_none=True) for name, descriptor in graph.descriptors.items()
        },
    }
    if catalog is not None:
        payload["hooks"] = catalog.as_dict()
    return payload


def _bullets(items: list[str] | tuple[str, ...]) -> list[str]:
    if not items:
        return ["- none"]
    return [f"- `{item}`" for item in items]


def render_markdown_report(graph: ExtensionGraph, catalog: HookCatalog | None = None) -> str:
    lines = [f"# Profile report: {graph.root}", ""]

    lines.append("## Profiles")
    for name in graph.extensions:
        descriptor = graph.descriptor(name)
        included = ", ".join(descriptor.profiles) or "none"
        marker = " (base)" if name == graph.root else ""
        lines.append(f"- `{name}`{marker}: includes {included}")
    lines.append("")

    lines.append(f"## Dependencies ({len(graph.dependencies)})")
    lines.extend(_bullets(graph.dependencies))
    lines.append("")

    lines.append(f"## Removed dependencies ({len(graph.removals)})")
    for name in graph.removals:
        owners = [profile for profile in graph.extensions if name in graph.descriptor(profile).remove_dependencies]
        lines.append(f"- `{name}` removed by {', '.join(owners)}")
    if not graph.removals:
        lines.append("- none")
    lines.append("")

    if catalog is not None:
        lines.append("## Hook implementations")
        for hook in catalog.hooks:
            found = catalog.implementations_for(hook)
            lines.append(f"### {hook.value} ({len(found)})")
            if not found:
                lines.append("- none")
            for item in found:
                lines.append(f"- `{item.function}` in {item.source}")
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def write_report_bundle(graph: ExtensionGraph, output_dir: str | Path, catalog: HookCatalog | None = None) -> dict[str, Path]:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    json_path = out / "profile_graph.json"
    md_path = out / "profile_report.md"
    json_path.write_text(json.dumps(graph_payload(graph, catalog), indent=2))
    md_path.write_text(render_markdown_report(graph, catalog))
    return {"json": json_path, "markdown": md_path}
