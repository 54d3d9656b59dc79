"""
Adapters - implementações dos Ports definidos no Core.
"""
