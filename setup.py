from setuptools import setup, find_packages

setup(
    name="fsplit-tools",
    version="1.0.0",
    description="Filtered concurrent directory traversal and round-robin directory splitting",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "rich>=13.0",
        "PyYAML>=6.0",
        "tqdm>=4.64",
        "argcomplete>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "fsplit-split = apps.cli:cli_split",
            "fsplit-cleanup = apps.cli:cli_cleanup",
            "fsplit-walk = apps.cli:cli_walk",
            "fsplit-purge = apps.cli:cli_purge",
        ],
    },
)
