"""Qt adapters for the pure-Python list view models.

Importing the submodules requires PySide6.
"""
