# Sphinx configuration for the gridio documentation.
#
# Build with: sphinx-build -b html docs/source docs/build

import os
import sys

sys.path.insert(0, os.path.abspath("../../src"))

import gridio  # noqa: E402

project = "gridio"
copyright = "2025, jmineau"
author = "jmineau"
release = gridio.__version__
version = ".".join(release.split(".")[:2])

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_autodoc_typehints",
]

master_doc = "index"
exclude_patterns = ["_build"]

html_theme = "pydata_sphinx_theme"
html_title = f"gridio {release}"
html_theme_options = {
    "show_toc_level": 2,
    "navigation_with_keys": False,
}

# GridIO docstrings are numpy style
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_rtype = False

autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}
typehints_document_rtype = False

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "pandas": ("https://pandas.pydata.org/pandas-docs/stable", None),
    "xarray": ("https://docs.xarray.dev/en/stable", None),
    "pyproj": ("https://pyproj4.github.io/pyproj/stable", None),
}
