#!/usr/bin/env python3
"""
Setup script for fonapy.
"""

from setuptools import setup, find_packages

setup(
    name="fonapy",
    version="0.1.0",
    description="Python library for controlling SIM800 / Adafruit FONA cellular modems via AT commands",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(include=["fonapy", "fonapy.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pyserial>=3.5",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-timeout>=2.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fona-cli=fonapy.cli:main",
        ],
    },
    keywords=["sim800", "fona", "gsm", "modem", "cellular", "at-commands", "sms", "gprs"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Communications",
        "Topic :: System :: Hardware :: Hardware Drivers",
        "Operating System :: POSIX :: Linux",
        "License :: OSI Approved :: MIT License",
    ],
)
