from setuptools import setup, find_packages

setup(
    name="scenario-harness",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "mcp>=1.0.0,<2",
        "playwright>=1.40.0",
        "pydantic>=2.0.0"
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "scenario-harness=scenario_harness.cli:main",
            "scenario-harness-mcp=scenario_harness.server:main"
        ]
    },
    python_requires=">=3.10",
)
