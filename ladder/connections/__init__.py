"""Connection graph: mutual, explicitly accepted relationships between users."""

from ladder.connections.graph import ConnectionGraph

__all__ = ["ConnectionGraph"]
