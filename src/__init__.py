"""Application Layer.

Infrastructure adapters and command-line entry points that orchestrate
domain logic. This layer handles file and archive I/O.
"""
