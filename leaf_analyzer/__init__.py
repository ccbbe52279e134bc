# leaf_analyzer/__init__.py
# Marks the directory as a Python package
