"""
Shared Kernel

Value objects, domain base classes, error codes and the unit of work /
message bus used by the venue and booking contexts.
"""
