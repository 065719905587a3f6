"""
Data models for the OS Resource Allocation Simulator.
"""
