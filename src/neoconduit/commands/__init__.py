"""
Commands - node-facing CLI commands.

Each module holds top-level commands of the ``neoconduit`` CLI:
- chain:  blockcount, version (read-only node queries)
- invoke: test-run a contract operation
- deploy: build, sign and optionally broadcast a deployment
"""
