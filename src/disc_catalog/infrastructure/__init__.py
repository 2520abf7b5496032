"""
Infrastructure Layer

External catalog adapters and catalog store implementations.
"""
