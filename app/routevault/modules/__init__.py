"""
Feature modules live under this package.

Keep module boundaries clean: each module owns its service logic and blueprint,
while reusing platform primitives (auth, RBAC, audit, document store).
"""
