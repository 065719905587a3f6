"""
Statistics, event log and algorithm comparison for the OS Resource Allocation Simulator.
"""
