# sarvam_tools/api/__init__.py
# =============================
# HTTP surface for the Sarvam toolset (FastAPI).
#
# Endpoints:
#   GET  /api/v1/tools
#   POST /api/v1/tools/{tool_name}
#   POST /api/v1/digitize
