"""
MerkelRex - step-driven exchange simulator with wallet settlement
"""

__version__ = "1.0.0"
