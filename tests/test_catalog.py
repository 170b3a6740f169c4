from profilekit.catalog import HookCatalog
from profilekit.discovery import InMemoryDeclarationSource
from profilekit.graph import GraphResolver
from profilekit.hooks import SUPPORTED_HOOKS, HookName
from profilekit.loader import ObjectCodeLoader


def _graph():
    source = InMemoryDeclarationSource(
        {
            "base": {"profiles": ["childA", "childB"]},
            "childA": {},
            "childB": {},
        }
    )
    return GraphResolver(source).resolve("base")


def _noop(payload, context):
    return None


def test_catalog_lists_implementations_in_graph_order() -> None:
    loader = ObjectCodeLoader(
        {
            "childB": {"childB_install": _noop},
            "base": {"base_install": _noop, "base_install_tasks": _noop},
            "childA": {"childA_install": _noop, "childA_install_tasks": "not callable"},
        }
    )

    catalog = HookCatalog.build(_graph(), SUPPORTED_HOOKS, loader)

    installs = catalog.implementations_for(HookName.INSTALL)
    assert [item.function for item in installs] == ["base_install", "childA_install", "childB_install"]
    assert [item.extension for item in installs] == ["base", "childA", "childB"]
    assert [item.function for item in catalog.implementations_for("install_tasks")] == ["base_install_tasks"]
    assert catalog.implementations_for(HookName.GATHER_DEPENDENCIES) == ()


def test_catalog_can_exclude_the_base_profile() -> None:
    loader = ObjectCodeLoader({"base": {"base_install": _noop}, "childA": {"childA_install": _noop}})

    catalog = HookCatalog.build(_graph(), [HookName.INSTALL], loader, include_root=False)

    assert [item.function for item in catalog.implementations_for(HookName.INSTALL)] == ["childA_install"]
    assert catalog.hooks == (HookName.INSTALL,)


def test_unsupported_or_unknown_hooks_have_no_implementations() -> None:
    loader = ObjectCodeLoader({"base": {"base_install_tasks": _noop}})

    catalog = HookCatalog.build(_graph(), [HookName.INSTALL], loader)

    assert catalog.implementations_for(HookName.GATHER_TASKS) == ()
    assert catalog.implementations_for("not_a_hook") == ()
    assert catalog.as_dict() == {"hook_install": []}
