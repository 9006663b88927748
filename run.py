"""
Launcher for Device Triage Planner.

The project folder name contains hyphens which
prevents `python -m <folder>` and `python .` from working with relative
imports.  This script registers the current directory under the alias
`triage_planner` and then executes __main__.py.

Usage (run from inside the project directory):
    python run.py
    python run.py scenarios
    python run.py score family_home --move smart_tv=iot
    python run.py lint
"""
import importlib.util
import sys
import types
from pathlib import Path

# Windows consoles default to a legacy code page; the score output uses
# box-drawing and arrow characters.
if sys.platform == "win32" and hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]

PKG_NAME = "triage_planner"
pkg_dir = Path(__file__).resolve().parent

# 1. Make parent visible so absolute imports work if ever used.
sys.path.insert(0, str(pkg_dir.parent))

# 2. Register this directory as the triage_planner package so that
#    relative imports (from .config import ...) inside __main__.py resolve.
pkg_mod = types.ModuleType(PKG_NAME)
pkg_mod.__path__ = [str(pkg_dir)]
pkg_mod.__package__ = PKG_NAME
pkg_mod.__spec__ = importlib.util.spec_from_file_location(
    PKG_NAME,
    pkg_dir / "__init__.py",
    submodule_search_locations=[str(pkg_dir)],
)
sys.modules[PKG_NAME] = pkg_mod
assert pkg_mod.__spec__ is not None, "Failed to create spec for package"
assert pkg_mod.__spec__.loader is not None, "Package spec has no loader"
pkg_mod.__spec__.loader.exec_module(pkg_mod)  # type: ignore[union-attr]

# 3. Load and execute __main__.py under the package namespace.
main_spec = importlib.util.spec_from_file_location(
    f"{PKG_NAME}.__main__",
    pkg_dir / "__main__.py",
    submodule_search_locations=[str(pkg_dir)],
)
assert main_spec is not None, f"Could not locate {PKG_NAME}.__main__"
assert main_spec.loader is not None, "__main__ spec has no loader"
main_mod = importlib.util.module_from_spec(main_spec)
main_mod.__package__ = PKG_NAME
sys.modules[f"{PKG_NAME}.__main__"] = main_mod
main_spec.loader.exec_module(main_mod)  # type: ignore[union-attr]

# exec_module loads __main__.py under its package name, so its
# `if __name__ == "__main__"` guard does not fire.
main_mod.main()
