"""Kube Exec: run a command inside a pod and collect a structured result."""

__version__ = "0.1.0"
