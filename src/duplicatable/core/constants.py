"""
Constants used throughout the Duplicatable package.
"""

from __future__ import annotations

# Finder that applies no filtering. Always available on every table.
DEFAULT_FINDER = "all"

# Finder selected by the deprecated ``include_translations`` flag.
TRANSLATIONS_FINDER = "translations"

# Separator between segments of a dotted path such as ``Items.Discounts.code``.
PATH_DELIMITER = "."

# Field carrying the link row data of a many-to-many association.
JOIN_DATA_FIELD = "_joinData"
