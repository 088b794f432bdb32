"""Performance benchmarks for probopt.

Timings and evaluation counts of the optimizers on the reference problems.
"""
