"""Starlette middlewares.

Learn: Starlette runs middleware in reverse order of registration, so
main.py registers the innermost layer first. Response flow:
handler → ServerSignature → HeaderPolicy → RequestId → Platform → client
"""
