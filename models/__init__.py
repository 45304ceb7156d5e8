"""
Models package for the Banker's Algorithm Simulator.
Contains the system state, input validation and result types.
"""
