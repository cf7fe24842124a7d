#!/usr/bin/env python

"""setuptools module for swarm_fairness package."""

import glob
import subprocess  # nosec
from shutil import rmtree
from os import environ, path
from sys import argv

from setuptools import Command, setup
from setuptools.command.build_py import build_py


class TestCommandExtension(Command):
    """Run pytest tests."""

    description = "Run tests"
    user_options: list = []

    def initialize_options(self):
        """No options."""

    def finalize_options(self):
        """No options."""

    def run(self):
        """Invoke pytest."""

        # pylint: disable=C0415, R1722

        import pytest

        exit(pytest.main(["--doctest-modules"]))


class LintCommand(build_py):
    """Custom setuptools command class for running linters."""

    description = "Run linters"

    def run(self):
        """Run linter shell commands."""
        files = " ".join(glob.glob("./**/*.py", recursive=True))
        lint_commands = [
            # # formatter:
            ("black --line-length 88 --check --diff " + files).split(),
            # static type checker:
            ("mypy --ignore-missing-imports " + files).split(),
            # general linter:
            ("pylint " + files).split(),
            # pylint takes relatively long to run, so it runs last, to enable
            # fast failures.
        ]

        # tell mypy where to find interface stubs for 3rd party libs
        environ["MYPYPATH"] = path.join(path.dirname(path.realpath(argv[0])), "stubs")

        for lint_command in lint_commands:
            print("Running lint command `", " ".join(lint_command).strip(), "`")
            subprocess.check_call(lint_command)  # nosec


class CleanCommandExtension(Command):
    """Custom command to do custom cleanup."""

    description = "Remove build and cache directories"
    user_options: list = []

    def initialize_options(self):
        """No options."""

    def finalize_options(self):
        """No options."""

    def run(self):
        """Remove the directories left by builds, linters and tests."""
        rmtree("build", ignore_errors=True)
        rmtree("dist", ignore_errors=True)
        rmtree(".mypy_cache", ignore_errors=True)
        rmtree(".tox", ignore_errors=True)
        rmtree(".pytest_cache", ignore_errors=True)


with open("README.md", "r") as file_handle:
    README_MD = file_handle.read()


setup(
    name="swarm-fairness-simulator",
    version="1.0.0",
    description="Round-based simulator of fairness and incentives in piece-exchange swarms",
    long_description=README_MD,
    long_description_content_type="text/markdown",
    cmdclass={
        "clean": CleanCommandExtension,
        "lint": LintCommand,
        "test": TestCommandExtension,
    },
    install_requires=["matplotlib", "mypy_extensions", "numpy", "typing_extensions"],
    extras_require={
        "dev": [
            "bandit",
            "black",
            "coverage",
            "mypy",
            "mypy_extensions",
            "pycodestyle",
            "pydocstyle",
            "pylint",
            "pytest",
            "tox",
        ]
    },
    python_requires=">=3.6, <4",
    py_modules=[
        "context",
        "data_processing",
        "data_types",
        "engine",
        "engine_candidates",
        "example",
        "message",
        "node",
        "performance",
        "permutation",
        "plot",
        "run",
        "scenario",
        "scenario_candidates",
        "single_run",
        "write_log",
    ],
    license="Apache 2.0",
    keywords="p2p swarm bittorrent fairness incentives simulator",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: System :: Networking",
        "Topic :: Scientific/Engineering",
    ],
    zip_safe=False,  # required per mypy
)
