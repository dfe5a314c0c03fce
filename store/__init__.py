"""store/ -- Key/value document stores backing identity records.

Layer rule: store/ imports only core/, stdlib, and third-party libraries.
It does NOT import from api/ or auth/.
"""
