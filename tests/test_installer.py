import logging
from pathlib import Path

import pytest

from profilekit.config import ProfileKitConfig
from profilekit.discovery import InMemoryDeclarationSource
from profilekit.errors import ImplementationError, NotFoundError
from profilekit.hooks import HookName
from profilekit.installer import ProfileInstaller
from profilekit.loader import ObjectCodeLoader


def test_dependencies_apply_removals_after_gathering(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)

    assert installer.graph.extensions == ("base", "childA")
    assert installer.graph.dependencies == ("moduleY",)
    assert installer.get_dependencies({"langcode": "en"}) == ["moduleY", "moduleZ"]


def test_install_profile_modules_is_computed_once_per_state(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)
    state = {"langcode": "en", "parameters": {"profile": "base"}}

    modules = installer.install_profile_modules(["system", "user"], state)
    again = installer.install_profile_modules(["system", "user"], {"parameters": {"profile": "base"}, "langcode": "en"})

    assert modules == ["system", "user", "moduleY", "moduleZ", "moduleAlter"]
    assert again == modules


def test_install_tasks_and_configure_form(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)
    state = {"langcode": "en"}

    tasks = installer.get_install_tasks(state)
    altered = installer.alter_install_tasks(tasks, state)
    form = installer.alter_install_configure_form({"site_name": ""}, {"step": "configure"})

    assert list(tasks) == ["base_task", "childA_task"]
    assert altered == tasks
    assert form == {"site_name": "Profile site"}
    assert installer.submit_install_configure_form(form, {"step": "configure"}) is None


def test_install_runs_callbacks_once(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)

    installer.install()
    installer.install()

    assert (profile_project / "profiles/base/installed.txt").read_text() == "base\n"
    assert (profile_project / "profiles/base/subprofiles/childA/installed.txt").read_text() == "childA\n"


def test_install_callbacks_override(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)
    callbacks = installer.install_callbacks()

    installer.set_install_callbacks([item for item in callbacks if item.extension == "childA"])
    installer.install()

    assert not (profile_project / "profiles/base/installed.txt").exists()
    assert (profile_project / "profiles/base/subprofiles/childA/installed.txt").read_text() == "childA\n"


def test_site_profiles_from_project_config(profile_project: Path, make_profile) -> None:
    make_profile(profile_project, "extra", {"dependencies": ["moduleExtra"]}, where="profiles/subprofiles/{name}")
    (profile_project / ".profilekit.yaml").write_text("site:\n  profiles: [extra]\n")

    installer = ProfileInstaller.from_project(profile_project, "base")

    assert installer.graph.extensions == ("base", "childA", "extra")
    assert installer.get_dependencies({"langcode": "en"}) == ["moduleY", "moduleExtra", "moduleZ"]


def test_failures_raise_unless_disabled(tmp_path: Path, make_profile, caplog) -> None:
    make_profile(
        tmp_path,
        "fragile",
        code="""
        def fragile_install_tasks(payload, context):
            raise RuntimeError("task registry unavailable")
        """,
    )

    strict = ProfileInstaller("fragile", project_path=tmp_path)
    with pytest.raises(ImplementationError, match="task registry unavailable"):
        strict.get_install_tasks({"langcode": "en"})

    lenient = ProfileInstaller.from_project(tmp_path, "fragile", runtime_override={"dispatch": {"raise_on_failure": False}})
    with caplog.at_level(logging.ERROR, logger="profilekit.installer"):
        assert lenient.get_install_tasks({"langcode": "en"}) == {}
    assert "fragile_install_tasks failed" in caplog.text


def test_unknown_base_profile(tmp_path: Path) -> None:
    installer = ProfileInstaller("missing", ProfileKitConfig(), project_path=tmp_path)

    with pytest.raises(NotFoundError):
        installer.get_dependencies()


def test_repeated_lifecycle_calls_return_the_first_result(profile_project: Path) -> None:
    installer = ProfileInstaller("base", project_path=profile_project)
    state = {"langcode": "en"}

    dependencies = installer.get_dependencies(state)
    tasks = installer.get_install_tasks(state)
    installer.alter_install_tasks(tasks, state)
    altered_dependencies = installer.alter_dependencies(["system"], state)
    form = installer.alter_install_configure_form({"site_name": ""}, {"step": "configure"})

    tasks["base_task"]["display_name"] = "mutated by host"

    assert installer.get_dependencies({"langcode": "en"}) == dependencies == ["moduleY", "moduleZ"]
    expected_tasks = {
        "base_task": {"display_name": "Configure base"},
        "childA_task": {"display_name": "Configure child"},
    }
    assert installer.get_install_tasks({"langcode": "en"}) == expected_tasks
    assert installer.alter_install_tasks({}, {"langcode": "en"}) == expected_tasks
    assert installer.alter_dependencies(["system"], {"langcode": "en"}) == altered_dependencies == ["system", "moduleAlter"]
    assert installer.alter_install_configure_form({"site_name": ""}, {"step": "configure"}) == form


def test_gathered_dependencies_are_not_regathered_for_an_equal_context() -> None:
    counts = {"base": 0, "childA": 0}

    def base_dependencies(payload, context):
        counts["base"] += 1
        return ["moduleZ"]

    def childA_dependencies(payload, context):
        counts["childA"] += 1
        return ["moduleX"]

    source = InMemoryDeclarationSource(
        {
            "base": {"profiles": ["childA"], "dependencies": ["moduleX"]},
            "childA": {"dependencies": ["moduleY"], "remove_dependencies": ["moduleX"]},
        }
    )
    loader = ObjectCodeLoader(
        {"base": {"base_dependencies": base_dependencies}, "childA": {"childA_dependencies": childA_dependencies}}
    )
    installer = ProfileInstaller("base", source=source, loader=loader)

    first = installer.get_dependencies({"langcode": "en", "step": 1})
    second = installer.get_dependencies({"step": 1, "langcode": "en"})

    assert first == second == ["moduleY", "moduleZ"]
    assert counts == {"base": 1, "childA": 1}
    records = installer.engine.invocations(HookName.GATHER_DEPENDENCIES)
    assert [(record.function, record.invoked) for record in records] == [
        ("base_dependencies", True),
        ("childA_dependencies", True),
    ]

    installer.get_dependencies({"langcode": "fr", "step": 1})
    assert counts == {"base": 2, "childA": 2}
