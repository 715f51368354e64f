"""
RUNFORGE - endless runner with generated worlds.

Describe a world in a sentence; a language model turns it into a theme
(palette, hero, obstacles, collectibles) and a three-lane runner plays it.
"""

__version__ = "0.1.0"
__author__ = "RUNFORGE Team"
