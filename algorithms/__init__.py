"""
Algorithms package for the OS Resource Allocation Simulator.
Contains the CPU scheduling, contiguous memory allocation and disk scheduling engines.
"""
