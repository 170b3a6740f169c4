from setuptools import find_packages, setup

setup(
    name="profilekit",
    version="0.1.0",
    description="Composable install profiles with idempotent, re-entrant-safe hook dispatch",
    packages=find_packages(include=["profilekit", "profilekit.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "ui": ["fastapi>=0.110", "uvicorn>=0.27"],
        "test": ["pytest>=7.4", "fastapi>=0.110", "httpx>=0.27"],
    },
    entry_points={"console_scripts": ["profilekit=profilekit.cli:main"]},
)
