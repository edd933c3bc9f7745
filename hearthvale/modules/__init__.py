"""
Demo gameplay subsystems built on the core lifecycle contract.
"""
