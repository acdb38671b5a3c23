"""
+--------+
|  EXEK  |
+--------+

Terminal launcher: fuzzy application search blended with frecency, and
filesystem path completion for `/`, `./`, `../` and `~` queries.
"""

PROG_NAME = "exek"
__version__ = "0.4.0"
