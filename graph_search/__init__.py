"""
Microsoft Search Connector

Compiles abstract search intents into Microsoft Graph search requests and
normalizes the heterogeneous, entity-typed hits that come back.
"""

__version__ = "1.0.0"
