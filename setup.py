from setuptools import setup, find_packages

setup(
    name="platnav",
    version="0.1.0",
    description="Navigation graphs, A* pathfinding and path following for 2D platformer agents",
    zip_safe=False,
    packages=find_packages(include=["platnav", "platnav.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "networkx",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
