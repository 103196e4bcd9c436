"""Spreadsheet importer for music releases (fonogramas / sencillos)."""

__version__ = "1.1.0"
