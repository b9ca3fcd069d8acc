# wimpatch/config/__init__.py
