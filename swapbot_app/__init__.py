"""
Swapbot - Hot-swappable Trading Bot Session Host

Hosts a long-running trading bot session whose decision logic is a
replaceable compiled module. User source is compiled by a compiler
service, loaded as a module and swapped in without losing the session's
live price stream.
"""

__version__ = "0.1.0"
__author__ = "Swapbot Team"
