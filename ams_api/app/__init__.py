"""
Application package for the Article Management System API.

``core`` holds configuration, logging, security helpers and the sheet
store; ``schemas`` the record and payload models; ``services`` the
actions, query filtering, authentication and notifications; ``api``
the request router and its HTTP endpoints.
"""
