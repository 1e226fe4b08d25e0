"""Party domain services: codes, registry, routing and connection lifecycle.

This package holds the session model and message routing, kept free of
Flask and Socket.IO so the transport layer only has to hand it a connection
handle, a raw message and a delivery object.
"""
