"""
Annotation Gateway - Services Layer
=====================================

Service Inventory:
    - ContentClient (abstract): Remote repository contents capability
    - GitHubContentClient: Concrete implementation over GitHub's REST API (httpx)
    - ContentGateway: The four annotation-workflow operations
"""
