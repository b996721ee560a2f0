"""
Custom setup.py to exclude pygame-dependent files from the wheel.

viewer.py and __main__.py need pygame (or are only useful next to it),
which is not installed in headless host deployments. They are only
needed for local interactive use and snapshots.
"""

from setuptools import setup
from setuptools.command.build_py import build_py as _build_py


# Modules that require pygame and should not be packaged in the wheel
_EXCLUDE_MODULES = {"viewer", "__main__"}


class BuildPy(_build_py):
    """build_py that skips the interactive-only modules."""

    def find_package_modules(self, package, package_dir):
        modules = super().find_package_modules(package, package_dir)
        return [
            (pkg, mod, path)
            for (pkg, mod, path) in modules
            if mod not in _EXCLUDE_MODULES
        ]


setup(
    cmdclass={"build_py": BuildPy},
)
