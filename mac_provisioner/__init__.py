"""macOS machine provisioner (state-recorded, probe-driven).

Core design goals:
- Idempotent steps: probe, act only if divergent, report
- Per-step outcomes recorded independently; a failure never halts the run
- Static data (packages, preferences, config files) lives in YAML manifests
- Centralized, append-only logging
"""

__all__ = []
