"""ShadowSync -- distributed context engine.

Turns free-form text into knowledge-graph facts, 2D semantic vector points,
and a bounded activity log, with synthetic health telemetry on the side.
"""

__version__ = "0.1.0"
