"""
Annotation Gateway - API Routes Package
=========================================

Route Inventory:
    - annotations.py:  GET  /api/images
                       GET  /api/annotated
                       GET  /api/old_ocr/{json_file}
                       POST /api/save-json
    - health.py:       GET  /health
"""
