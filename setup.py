"""
Build script for markupguard with optional mypyc compilation.

Usage:
    # Pure Python build (default)
    python -m build

    # Compiled with mypyc
    MARKUPGUARD_USE_MYPYC=1 pip install .
"""

import os
import sys
from pathlib import Path

from setuptools import find_packages, setup

# Determine if we should use mypyc
USE_MYPYC = os.environ.get("MARKUPGUARD_USE_MYPYC", "0") == "1"

# Modules to compile with mypyc (the per-attribute and per-declaration hot paths).
# Note: policy.py is excluded because mypyc does not support frozen slotted
# dataclasses that normalize their fields in __post_init__.
MYPYC_MODULES = [
    "src/markupguard/urls.py",
    "src/markupguard/css.py",
    "src/markupguard/serialize.py",
]


def build_with_mypyc() -> list:
    """Build extension modules using mypyc."""
    try:
        from mypyc.build import mypycify
    except ImportError:
        print(
            "ERROR: mypyc is not installed. Install with: pip install mypy",
            file=sys.stderr,
        )
        print("Or install with mypyc support: pip install markupguard[mypyc]", file=sys.stderr)
        sys.exit(1)

    for module_path in MYPYC_MODULES:
        if not Path(module_path).exists():
            print(f"ERROR: Module not found: {module_path}", file=sys.stderr)
            sys.exit(1)

    print(f"Compiling {len(MYPYC_MODULES)} modules with mypyc:")
    for module in MYPYC_MODULES:
        print(f"  - {module}")

    opt_level = os.environ.get("MYPYC_OPT_LEVEL", "3")
    return mypycify(MYPYC_MODULES, opt_level=opt_level, separate=False, multi_file=False)


if __name__ == "__main__":
    ext_modules = []

    if USE_MYPYC:
        ext_modules = build_with_mypyc()

    setup(
        name="markupguard",
        version="0.1.0",
        description="Policy-driven sanitizer for untrusted rich-text HTML",
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=["html5lib>=1.1"],
        extras_require={
            "test": ["pytest>=7"],
            "mypyc": ["mypy>=1.0"],
        },
        entry_points={"console_scripts": ["markupguard=markupguard.__main__:main"]},
        ext_modules=ext_modules,
    )
