# setup.py
from setuptools import setup, find_packages

setup(
    name="embedres",
    version="0.1.0",
    description="Pack directory trees into Python modules exposing a read-only embedded filesystem",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "embedres=embedres.interface.cli.app:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
