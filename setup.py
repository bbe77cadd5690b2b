"""
Setup script for browser-runner
"""

from setuptools import setup, find_packages
import pathlib

HERE = pathlib.Path(__file__).parent
README = (HERE / "README.md").read_text(encoding="utf-8")

setup(
    name="browser-runner",
    version="1.0.0",
    description="Ad hoc Playwright script executor with local dev-server detection",
    long_description=README,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.27.0",
        "playwright>=1.44.0",
        "pydantic>=2.7.0",
        "pydantic-settings>=2.3.0",
        "structlog>=24.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "browser-run=browser_runner.cli.main:entry_point",
            "browser-detect=browser_runner.cli.detect:entry_point",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    keywords="playwright browser automation dev-server script-runner",
)
