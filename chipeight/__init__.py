"""A CHIP-8 virtual machine with a pygame front end."""

__version__ = "0.1.0"