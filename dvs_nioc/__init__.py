"""
vSphere distributed switch Network I/O Control (NIOC) tooling.

This package provides:
- vCenter session client (pyVmomi)
- Traffic share configurator and read-only share report
- YAML / environment configuration and logging setup
- `dvs-nioc` command line entry point
"""
