"""OGS presence backend.

This package is organized by feature modules (attendance, time_tracking,
absences, substitutions, cleanup, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""

__version__ = "0.1.0"
