"""QuakeWatch West - Western Canada earthquake monitor."""

__version__ = "1.0.0"
