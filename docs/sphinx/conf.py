# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the Flowdraw documentation."""

project = "Flowdraw"
author = "Flowdraw Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]
autodoc_member_order = "bysource"
napoleon_google_docstring = True

html_theme = "alabaster"
