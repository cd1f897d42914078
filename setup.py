from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent

setup(
    name="saga-reactor",
    version="0.1.0",
    description="Saga-pattern workflow orchestration with compensation and rollback",
    packages=find_packages(include=["saga_reactor", "saga_reactor.*"]),
    install_requires=[
        line
        for line in (HERE / "requirements-core.txt").read_text().splitlines()
        if line and not line.startswith("#")
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
