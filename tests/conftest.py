from pathlib import Path
from textwrap import dedent

import pytest
import yaml


def write_profile(
    project: Path,
    name: str,
    info: dict | None = None,
    *,
    where: str = "profiles/{name}",
    code: str | None = None,
    unit: str = "install.py",
) -> Path:
    directory = project / where.format(name=name)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{name}.info.yml").write_text(yaml.safe_dump(info or {}))
    if code is not None:
        (directory / unit).write_text(dedent(code))
    return directory


@pytest.fixture
def make_profile():
    return write_profile


@pytest.fixture
def profile_project(tmp_path: Path) -> Path:
    """A base profile that includes one subprofile, both with hook code."""
    project = tmp_path / "site"
    write_profile(
        project,
        "base",
        {"description": "Base profile", "profiles": ["childA"], "dependencies": ["moduleX"]},
        code="""
        from pathlib import Path


        def base_dependencies(payload, context):
            return ["moduleZ", "moduleX"]


        def base_dependencies_alter(payload, context):
            return [*payload, "moduleAlter"]


        def base_install_tasks(payload, context):
            return {"base_task": {"display_name": "Configure base"}}


        def base_form_install_configure_form_alter(payload, context):
            return {**payload, "site_name": "Profile site"}


        def base_install(payload, context):
            with (Path(__file__).parent / "installed.txt").open("a") as handle:
                handle.write("base\\n")
        """,
    )
    write_profile(
        project,
        "childA",
        {"dependencies": ["moduleY"], "remove_dependencies": ["moduleX"]},
        where="profiles/base/subprofiles/{name}",
        code="""
        from pathlib import Path


        def childA_install_tasks(payload, context):
            return {"childA_task": {"display_name": "Configure child"}}


        def childA_install(payload, context):
            with (Path(__file__).parent / "installed.txt").open("a") as handle:
                handle.write("childA\\n")
        """,
    )
    return project
