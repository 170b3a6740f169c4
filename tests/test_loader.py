import sys
from pathlib import Path
from types import SimpleNamespace

from profilekit.loader import FileCodeLoader, ObjectCodeLoader
from profilekit.models import ExtensionDescriptor


def test_file_loader_prefers_earlier_code_units(tmp_path: Path) -> None:
    (tmp_path / "install.py").write_text("def demo_install(payload, context):\n    return 'install'\n")
    (tmp_path / "profile.py").write_text(
        "def demo_install(payload, context):\n    return 'profile'\n\n"
        "def demo_install_tasks(payload, context):\n    return {'task': 1}\n\n"
        "demo_dependencies = ['not', 'callable']\n"
    )
    descriptor = ExtensionDescriptor(name="demo", path=str(tmp_path))
    loader = FileCodeLoader()

    install = loader.lookup(descriptor, "demo_install")
    tasks = loader.lookup(descriptor, "demo_install_tasks")

    assert install is not None and install.callback(None, None) == "install"
    assert install.source == str(tmp_path / "install.py")
    assert tasks is not None and tasks.callback({}, None) == {"task": 1}
    assert loader.lookup(descriptor, "demo_dependencies") is None
    assert not any(name.startswith("profilekit_units.") for name in sys.modules)


def test_file_loader_imports_each_unit_once(tmp_path: Path) -> None:
    (tmp_path / "install.py").write_text("LOADS = []\nLOADS.append(1)\n\ndef demo_install(payload, context):\n    return LOADS\n")
    descriptor = ExtensionDescriptor(name="demo", path=str(tmp_path))
    loader = FileCodeLoader()

    first = loader.lookup(descriptor, "demo_install")
    second = loader.lookup(descriptor, "demo_install")

    assert first is not None and second is not None
    assert second.callback(None, None) == [1]


def test_file_loader_without_path_finds_nothing() -> None:
    assert FileCodeLoader().lookup(ExtensionDescriptor(name="demo"), "demo_install") is None


def test_object_loader_supports_mappings_and_objects() -> None:
    unit = SimpleNamespace(demo_install=lambda payload, context: "object")
    loader = ObjectCodeLoader({"mapped": {"mapped_install": lambda payload, context: "mapping"}})
    loader.register("demo", unit)

    mapped = loader.lookup(ExtensionDescriptor(name="mapped"), "mapped_install")
    demo = loader.lookup(ExtensionDescriptor(name="demo"), "demo_install")

    assert mapped is not None and mapped.callback(None, None) == "mapping"
    assert mapped.source == "<mapped>"
    assert demo is not None and demo.callback(None, None) == "object"
    assert loader.lookup(ExtensionDescriptor(name="other"), "other_install") is None
