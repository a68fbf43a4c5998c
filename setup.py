"""Setup for TwinTimer.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "TwinTimer",
        "CFBundleDisplayName": "TwinTimer",
        "CFBundleIdentifier": "com.twintimer.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

py2app_kwargs = {}
if "py2app" in sys.argv:
    py2app_kwargs = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="TwinTimer",
    version="0.1.0",
    description="Stopwatch and countdown timer with a persisted session history",
    packages=find_packages(include=["twintimer", "twintimer.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6",
        "SQLAlchemy>=2.0",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "gui_scripts": ["twintimer = twintimer.__main__:main"],
    },
    **py2app_kwargs,
)
