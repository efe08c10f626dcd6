"""
qplacer: quadratic placement of floating cells around static anchors.
"""

__version__ = "0.1.0"
