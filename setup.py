"""KadePOS setup - orders that survive a dropped connection."""
from setuptools import setup, find_packages

setup(
    name="kadepos",
    version="0.4.0",
    description="KadePOS: offline order queue and sync for a restaurant point of sale",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "requests>=2.28",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "kadepos=kadepos.cli.main:cli",
        ],
    },
)
