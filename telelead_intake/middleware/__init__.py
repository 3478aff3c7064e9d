# telelead_intake/middleware/__init__.py
"""
HTTP middleware: request ids, access logging, body size limit.
"""
