"""Records application for the medtrack backend.

This package contains the medical record model, the owner-scoped record
store, the health analyzer and the API views built on top of them.
"""
