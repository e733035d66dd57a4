"""setuptools setup for Tickdown.

Install for development:
    pip install -e ".[test]"
    tickdown run --minutes 5
"""

from setuptools import setup, find_packages

setup(
    name="tickdown",
    version="0.1.0",
    description="Single-timer countdown service that survives process death",
    packages=find_packages(include=["tickdown", "tickdown.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
        "click>=8.1",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": ["tickdown=tickdown.__main__:main"],
    },
)
