# sarvam_tools/tools/__init__.py
# ===============================
# Agent tools backed by the Sarvam API.
#
# Single-call tools live in speech.py and translate.py; toolset.py
# registers them together with the document digitization tool.
