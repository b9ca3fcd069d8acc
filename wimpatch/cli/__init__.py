# wimpatch/cli/__init__.py
