"""
pagegen - Wiki Page Generator for Game DataTables

Renders rows of exported game DataTables into MediaWiki pages through
``{{{key}}}`` templates, with typed field extraction driven by struct
definitions and localized display text.
"""

__version__ = "0.1.0"
__author__ = "pagegen contributors"

from pagegen.generator import PageGenerator, build_localization
