"""auth/ -- Authentication and authorization package for the school records service.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or school/.
api/ and school/ import from auth/, not the other way around.
"""
