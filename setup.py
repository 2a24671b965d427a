import sys
from pathlib import Path

from setuptools import setup, find_namespace_packages

if sys.version_info[0:2] < (3, 8):
    raise RuntimeError("This package requires Python 3.8+.")

setup(
    name="moat-lib-dpid",
    version="0.1.0",
    packages=find_namespace_packages(include=["moat.*"]),
    package_data={"moat.lib.dpid": ["_cfg.yaml"]},
    url="https://github.com/M-o-a-T/moat",
    license="MIT",
    author="Matthias Urlichs",
    author_email="<matthias@urlichs.de>",
    description="A discrete-time PID controller with bumpless transfer",
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    install_requires=[
        "anyio>=3.0",
        "asyncclick>=8.1",
        "attrs>=22.2",
        "moat-util",
        # moat-util 0.57 breaks on import with other moat-lib-codec releases
        "moat-lib-codec==0.4.2",
    ],
    extras_require={
        "test": ["pytest", "numpy", "trio"],
    },
    entry_points={
        "console_scripts": ["moat-dpid = moat.lib.dpid._main:cli"],
    },
    python_requires=">=3.8",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Framework :: AnyIO",
        "Framework :: Trio",
        "License :: OSI Approved",
        "Topic :: Scientific/Engineering",
    ],
)
