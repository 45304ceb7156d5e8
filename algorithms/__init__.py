"""
Algorithms package for the Banker's Algorithm Simulator.
Contains the safety check, safe sequence enumeration, request evaluation
and release handling.
"""
