"""
Annotation Gateway - Application Package
==========================================

Backend for the OCR annotation tool. Proxies a small set of operations to a
GitHub repository that holds the source images, the original OCR output and
the reviewed annotations.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     ContentGateway (Business Logic) │  ← path conventions, sha protocol
    ├─────────────────────────────────────┤
    │   ContentClient (Remote Capability) │  ← GitHub contents API via httpx
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
