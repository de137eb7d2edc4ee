# setup.py
from setuptools import setup, find_packages

setup(
    name="migration_checker",
    version="0.1.0",
    description="Crawl a source website and validate its URLs on a migrated destination",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"migration_checker": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "migration-checker=migration_checker.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
