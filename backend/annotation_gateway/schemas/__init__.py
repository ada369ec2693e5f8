# Pydantic models: remote (GitHub contents API) and API (our HTTP surface)
