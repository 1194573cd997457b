"""dayshape: conflict detection and resolution engine for a planned day."""

__version__ = "0.1.0"
