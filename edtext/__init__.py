"""Editable text buffers with undo, and a box-model layout engine for frames of text."""

__version__ = "0.1.0"