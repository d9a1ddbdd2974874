"""fpvsim - FPV drone flight and checkpoint racing core."""

__version__ = "0.1.0"
