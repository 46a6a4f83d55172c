"""blog/ -- Post persistence with the author-only mutation rule.

Layer rule: blog/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or auth/. The caller supplies the authenticated
subject id; blog/ never looks at tokens.
"""
