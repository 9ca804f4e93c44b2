"""
Pydantic schema definitions for records and API payloads.

Record schemas (articles, editors) also own their sheet row layout so
that the services can move rows in and out of storage without knowing
the column order.
"""
