"""Qt integration; requires the ``gui`` extra (PySide6)."""
