"""Transport layer — the contract the executor calls through, plus a replay transport.

Real network transports live outside this package. This layer depends on
the domain layer and ruamel.yaml only.
"""
