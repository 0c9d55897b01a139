# setup.py

from setuptools import setup, find_packages

setup(
    name="ArgonMD",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "numba",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
