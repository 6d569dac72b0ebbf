"""XMLTV grabber: reconciles XMLTV schedules into a program guide."""

__version__ = "0.1.0"
