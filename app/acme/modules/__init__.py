"""
Feature modules live under this package.

Keep module boundaries clean: each module owns its models, queries, actions and routes,
while reusing platform primitives (auth gate, validation, storage, DB session).
"""
