"""
Snapshot format shared by the persistence adapters.
"""
