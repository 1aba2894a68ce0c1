"""
Ladder - access control and privacy filtering for the Ladder platform.

Bearer-token authentication, role and ownership gates, password reset,
the connection graph, and connection-aware content visibility.
"""

__version__ = "0.1.0"
