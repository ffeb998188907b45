"""
Monkey: a Pratt parser and tree-walking interpreter.
"""
__version__ = "0.1.0"
