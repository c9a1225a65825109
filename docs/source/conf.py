from __future__ import annotations
import sys
from pathlib import Path
from importlib.metadata import version as pkg_version, PackageNotFoundError

# --- Make the package importable (src-layout) ---
ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

# --- Project info ---
project = "qdaim"
author = "qdaim developers"
try:
    release = pkg_version("qdaim")
    version = ".".join(release.split(".")[:2])
except PackageNotFoundError:
    release = version = "0.1.0"

# --- Extensions ---
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",      # NumPy docstrings
    "sphinx.ext.mathjax",       # Green's function and Lagrange formulas
    "sphinx.ext.viewcode",
    "myst_parser",              # index.md is Markdown
]

# Build autosummary pages for modules/classes/functions automatically
autosummary_generate = True

# Autodoc settings
autodoc_default_options = {
    "members": True,
    "undoc-members": False,
    "show-inheritance": True,
}
autodoc_typehints = "description"      # keep signatures clean; put types in body
autodoc_class_signature = "separated"  # ClassName(args...) shown below title
autodoc_preserve_defaults = True

# matplotlib is only imported by the example and test plotting paths
autodoc_mock_imports = ["matplotlib"]

# Napoleon (NumPy docstrings only)
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_param = True
napoleon_use_rtype = True


# Theme
html_theme = "furo"

# General Sphinx settings
templates_path = ["_templates"]
exclude_patterns = ["_build"]
