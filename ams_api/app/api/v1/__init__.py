"""
Version 1 of the HTTP API.

Breaking changes to the HTTP surface should go into a new version
subpackage to keep existing clients working.
"""
