"""
Tool presence checks.

- `probes`: host lookups (PATH, subprocess, filesystem)
- `managers`: package-manager query commands and listing parsers
- `checker`: ToolAvailabilityChecker, one CheckResult per request / tool entry
"""
