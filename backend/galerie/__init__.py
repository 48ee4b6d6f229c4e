"""
Galerie Pictogrammes backend.

Data layer, migration tooling and process shell for the pictogram gallery.
"""

__version__ = "0.1.0"
