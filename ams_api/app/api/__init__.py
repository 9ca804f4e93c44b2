"""
Request routing.

``router`` holds the two-level ``Router`` that maps ``context/action``
to service actions; versioned HTTP endpoints live in subpackages such
as ``v1``.
"""
