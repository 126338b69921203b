"""
One-off maintenance scripts for the MongoDB data and the docs export.

Run with python -m apps.maintenance.<script> --help.
"""
