"""auth/ -- Identity, credential, and channel-authorization package for channelsync.

Layer rule: auth/ imports only core/, stdlib, and third-party libraries.
It does NOT import from api/ or store/; the document store is injected.
api/ imports from auth/, not the other way around.
"""
