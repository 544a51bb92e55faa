from setuptools import setup, find_packages

setup(
    name="connect4-engine",
    version="1.0.0",
    description="Connect Four rules engine and turn-based state machine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",     # board grid
        "filelock",  # locking for saved game files
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "connect4=connect4_engine.interfaces.cli:main",
        ],
    },
)
