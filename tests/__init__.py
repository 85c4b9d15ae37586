"""
Only the root tests directory carries an __init__.py.

It makes `tests` importable as a package (`from tests.helpers.helper_bank import ...`),
while subdirectories work as namespace packages (PEP 420) and need no __init__.py.
"""
