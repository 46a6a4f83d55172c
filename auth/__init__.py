"""auth/ -- Authentication and account management package for Inkwell.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or blog/.
api/ imports from auth/, not the other way around.
"""
