"""
salon_identity.stub.routers

Route modules of the stub backend, mounted under `/api` by `stub.app`.
"""

# Package marker.
